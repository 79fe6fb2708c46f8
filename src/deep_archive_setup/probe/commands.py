"""Executable lookup on the process search path."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from typing import Iterable, Protocol


class CommandAvailability(Protocol):
    """Answers whether an executable can be found on the search path."""

    def is_available(self, command: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class PathLookup:
    """Resolve commands with ``shutil.which`` against ``search_path`` (default: ``$PATH``)."""

    search_path: str | None = None

    def is_available(self, command: str) -> bool:
        return shutil.which(command, path=self.search_path) is not None


@dataclass(frozen=True, slots=True)
class StaticAvailability:
    """Fixed set of available commands, for dry runs and tests."""

    commands: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, commands: Iterable[str]) -> "StaticAvailability":
        return cls(commands=frozenset(commands))

    def is_available(self, command: str) -> bool:
        return command in self.commands
