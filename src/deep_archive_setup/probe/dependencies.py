"""Non-fatal probing of external executables the media pipeline shells out to."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from deep_archive_setup.config import DependencyConfig
from deep_archive_setup.probe.commands import CommandAvailability

LOGGER = logging.getLogger(__name__)

GENERIC_HINT = "Install {name} with your system package manager and make sure it is on PATH."


@dataclass(frozen=True, slots=True)
class DependencyReport:
    """Outcome of probing every configured dependency.

    ``missing`` is the warning set: absent executables never stop the run.
    """

    present: frozenset[str]
    missing: frozenset[str]
    hints: tuple[tuple[str, str], ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.missing)


def install_hint(dependency: DependencyConfig, platform_id: str) -> str:
    """Return the install instruction for ``platform_id`` or a generic fallback."""

    hint = dependency.install_hints.get(platform_id)
    if hint:
        return hint
    return GENERIC_HINT.format(name=dependency.name)


def check_dependencies(
    dependencies: Sequence[DependencyConfig],
    availability: CommandAvailability,
    platform_id: str,
    logger: logging.Logger | None = None,
) -> DependencyReport:
    """Probe each dependency in order and collect the missing ones."""

    effective_logger = logger or LOGGER
    present: set[str] = set()
    missing: set[str] = set()
    hints: list[tuple[str, str]] = []

    for dependency in dependencies:
        if availability.is_available(dependency.name):
            present.add(dependency.name)
            effective_logger.info("dependencies.present name=%s", dependency.name)
            continue
        missing.add(dependency.name)
        hints.append((dependency.name, install_hint(dependency, platform_id)))
        effective_logger.warning("dependencies.missing name=%s", dependency.name)

    if missing:
        effective_logger.warning(
            "dependencies.degraded missing=%s platform=%s",
            ",".join(sorted(missing)),
            platform_id,
        )
        for name, hint in hints:
            effective_logger.warning("dependencies.install_hint name=%s hint=%s", name, hint)

    return DependencyReport(present=frozenset(present), missing=frozenset(missing), hints=tuple(hints))
