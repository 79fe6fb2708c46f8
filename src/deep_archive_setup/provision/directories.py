"""Create the working directories the media pipeline writes into."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from deep_archive_setup.results import Fatal

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryReport:
    """Which required directories were created and which already existed."""

    created: tuple[Path, ...]
    already_present: tuple[Path, ...]

    @property
    def all_present(self) -> tuple[Path, ...]:
        return tuple(sorted(self.created + self.already_present))


def ensure_directories(
    paths: Iterable[Path],
    logger: logging.Logger | None = None,
) -> DirectoryReport | Fatal:
    """Create every missing directory (with parents), leaving existing ones untouched.

    A path that exists as something other than a directory, or that cannot be
    created, stops provisioning immediately. Directories created before the
    failure are kept.
    """

    effective_logger = logger or LOGGER
    created: list[Path] = []
    already_present: list[Path] = []

    for directory in sorted(set(paths)):
        if directory.is_dir():
            already_present.append(directory)
            effective_logger.info("directories.present path=%s", directory)
            continue
        if directory.exists():
            effective_logger.error("directories.not_a_directory path=%s", directory)
            return Fatal(kind="directory", detail="path exists and is not a directory", path=directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            effective_logger.error("directories.create_failed path=%s error=%s", directory, exc)
            return Fatal(kind="directory", detail=f"cannot create directory: {exc}", path=directory)
        created.append(directory)
        effective_logger.info("directories.created path=%s", directory)

    return DirectoryReport(created=tuple(created), already_present=tuple(already_present))
