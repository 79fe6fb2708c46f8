"""Fetch model artifacts that are not yet on disk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Sequence

from deep_archive_setup.config import ArtifactConfig
from deep_archive_setup.fetch.transports import Transport, select_transport
from deep_archive_setup.probe.commands import CommandAvailability
from deep_archive_setup.results import Fatal

LOGGER = logging.getLogger(__name__)

ArtifactStatus = Literal["already_satisfied", "downloaded"]


@dataclass(frozen=True, slots=True)
class ArtifactResult:
    """Per-artifact outcome recorded by the downloader."""

    url: str
    dest: Path
    status: ArtifactStatus


@dataclass(frozen=True, slots=True)
class ArtifactReport:
    """Ordered artifact outcomes plus the transport used for the run.

    ``transport`` is ``None`` when nothing needed fetching. When the stage
    stopped early, ``fatal`` is set and ``results`` holds what was already
    satisfied or downloaded before the failure.
    """

    transport: str | None
    results: tuple[ArtifactResult, ...]
    fatal: Fatal | None = None

    def with_status(self, status: ArtifactStatus) -> tuple[Path, ...]:
        return tuple(result.dest for result in self.results if result.status == status)

    @property
    def downloaded(self) -> tuple[Path, ...]:
        return self.with_status("downloaded")

    @property
    def already_satisfied(self) -> tuple[Path, ...]:
        return self.with_status("already_satisfied")


def fetch_artifacts(
    artifacts: Sequence[ArtifactConfig],
    transports: Sequence[Transport],
    availability: CommandAvailability,
    logger: logging.Logger | None = None,
) -> ArtifactReport:
    """Download each missing artifact in order with a single transport.

    An existing destination counts as satisfied and is never re-fetched or
    checked. The transport is chosen right before the first missing artifact,
    so a fully provisioned host needs no downloader at all. Downloads are not
    verified against a checksum; the transport's completion status is the
    only success signal. The first failure stops the loop, later artifacts
    are not attempted, and a partially written destination is left in place
    for inspection.
    """

    effective_logger = logger or LOGGER
    results: list[ArtifactResult] = []
    transport: Transport | None = None

    def _stopped(fatal: Fatal) -> ArtifactReport:
        return ArtifactReport(
            transport=transport.name if transport is not None else None,
            results=tuple(results),
            fatal=fatal,
        )

    for artifact in artifacts:
        if artifact.dest.exists():
            effective_logger.info("artifacts.already_satisfied dest=%s", artifact.dest)
            results.append(ArtifactResult(url=artifact.url, dest=artifact.dest, status="already_satisfied"))
            continue

        if transport is None:
            selected = select_transport(transports, availability, logger=effective_logger)
            if isinstance(selected, Fatal):
                return _stopped(selected)
            transport = selected

        try:
            artifact.dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            effective_logger.error("artifacts.parent_create_failed dest=%s error=%s", artifact.dest, exc)
            return _stopped(Fatal(kind="download", detail=f"cannot create parent directory: {exc}", path=artifact.dest))

        effective_logger.info(
            "artifacts.download_start dest=%s url=%s transport=%s",
            artifact.dest,
            artifact.url,
            transport.name,
        )
        outcome = transport.fetch(artifact.url, artifact.dest)
        if not outcome.ok:
            effective_logger.error(
                "artifacts.download_failed dest=%s url=%s detail=%s",
                artifact.dest,
                artifact.url,
                outcome.detail,
            )
            if artifact.dest.exists():
                effective_logger.warning("artifacts.partial_file_kept dest=%s", artifact.dest)
            return _stopped(
                Fatal(kind="download", detail=f"failed to download {artifact.url}: {outcome.detail}", path=artifact.dest)
            )

        effective_logger.info("artifacts.downloaded dest=%s", artifact.dest)
        results.append(ArtifactResult(url=artifact.url, dest=artifact.dest, status="downloaded"))

    return ArtifactReport(transport=transport.name if transport is not None else None, results=tuple(results))
