"""Bootstrap orchestration: directories, dependency probe, artifact fetch."""

from __future__ import annotations

import logging
import stat
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Sequence

from deep_archive_setup.config import AppSettings
from deep_archive_setup.fetch.downloader import ArtifactReport, fetch_artifacts
from deep_archive_setup.fetch.transports import Transport, build_transports
from deep_archive_setup.probe.commands import CommandAvailability, PathLookup
from deep_archive_setup.probe.dependencies import DependencyReport, check_dependencies
from deep_archive_setup.probe.platform_id import detect_platform
from deep_archive_setup.provision.directories import DirectoryReport, ensure_directories
from deep_archive_setup.results import Fatal

LOGGER = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class RunState(str, Enum):
    INIT = "init"
    DIRECTORIES_PROVISIONED = "directories_provisioned"
    DEPENDENCIES_CHECKED = "dependencies_checked"
    ARTIFACTS_FETCHED = "artifacts_fetched"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class BootstrapRunOptions:
    """Injectable collaborators for a bootstrap run."""

    availability: CommandAvailability = field(default_factory=PathLookup)
    transports: Sequence[Transport] | None = None
    platform_id: str | None = None
    entry_script: Path | None = None


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    """Final state of a run and every stage report reached before it ended."""

    state: RunState
    directories: DirectoryReport | None = None
    dependencies: DependencyReport | None = None
    artifacts: ArtifactReport | None = None
    fatal: Fatal | None = None
    duration_sec: float = 0.0

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.state is RunState.DONE else EXIT_FAILURE

    @property
    def warnings(self) -> frozenset[str]:
        if self.dependencies is None:
            return frozenset()
        return self.dependencies.missing


def _reassert_executable(script: Path, logger: logging.Logger) -> None:
    """Add user/group/other execute bits to ``script`` if it is a regular file."""

    try:
        if not script.is_file():
            return
        mode = script.stat().st_mode
        wanted = mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
        if wanted != mode:
            script.chmod(wanted)
            logger.info("bootstrap.entry_script_chmod path=%s", script)
    except OSError as exc:
        logger.warning("bootstrap.entry_script_chmod_failed path=%s error=%s", script, exc)


def _aborted(
    fatal: Fatal,
    started_mono: float,
    logger: logging.Logger,
    *,
    directories: DirectoryReport | None = None,
    dependencies: DependencyReport | None = None,
    artifacts: ArtifactReport | None = None,
) -> BootstrapResult:
    logger.error("bootstrap.aborted kind=%s detail=%s", fatal.kind, fatal.detail)
    return BootstrapResult(
        state=RunState.ABORTED,
        directories=directories,
        dependencies=dependencies,
        artifacts=artifacts,
        fatal=fatal,
        duration_sec=round(time.monotonic() - started_mono, 3),
    )


def run_bootstrap(
    settings: AppSettings,
    *,
    options: BootstrapRunOptions | None = None,
    logger: logging.Logger | None = None,
) -> BootstrapResult:
    """Provision directories, probe dependencies, then fetch missing artifacts.

    Stops at the first fatal outcome. Missing dependencies are reported as
    warnings and do not change the exit code.
    """

    effective_logger = logger or LOGGER
    run_options = options or BootstrapRunOptions()
    started_mono = time.monotonic()
    state = RunState.INIT
    effective_logger.info("bootstrap.start state=%s", state.value)

    directories = ensure_directories(settings.paths.required_directories(), logger=effective_logger)
    if isinstance(directories, Fatal):
        return _aborted(directories, started_mono, effective_logger)
    state = RunState.DIRECTORIES_PROVISIONED
    effective_logger.info(
        "bootstrap.state state=%s created=%s already_present=%s",
        state.value,
        len(directories.created),
        len(directories.already_present),
    )

    platform_id = run_options.platform_id or detect_platform()
    dependencies = check_dependencies(
        settings.dependencies,
        run_options.availability,
        platform_id,
        logger=effective_logger,
    )
    state = RunState.DEPENDENCIES_CHECKED
    effective_logger.info(
        "bootstrap.state state=%s present=%s missing=%s",
        state.value,
        len(dependencies.present),
        len(dependencies.missing),
    )

    transports = run_options.transports
    if transports is None:
        transports = build_transports(settings.transport)
    artifacts = fetch_artifacts(settings.artifacts, transports, run_options.availability, logger=effective_logger)
    if artifacts.fatal is not None:
        return _aborted(
            artifacts.fatal,
            started_mono,
            effective_logger,
            directories=directories,
            dependencies=dependencies,
            artifacts=artifacts,
        )
    state = RunState.ARTIFACTS_FETCHED
    effective_logger.info(
        "bootstrap.state state=%s downloaded=%s already_satisfied=%s",
        state.value,
        len(artifacts.downloaded),
        len(artifacts.already_satisfied),
    )

    if run_options.entry_script is not None:
        _reassert_executable(run_options.entry_script, effective_logger)

    state = RunState.DONE
    duration_sec = round(time.monotonic() - started_mono, 3)
    effective_logger.info(
        "bootstrap.done warnings=%s duration_sec=%.3f",
        ",".join(sorted(dependencies.missing)) or "none",
        duration_sec,
    )
    return BootstrapResult(
        state=state,
        directories=directories,
        dependencies=dependencies,
        artifacts=artifacts,
        duration_sec=duration_sec,
    )
