"""Tagged stage outcomes shared by the bootstrap stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

FatalKind = Literal["directory", "transport_unavailable", "download"]


@dataclass(frozen=True, slots=True)
class Fatal:
    """A stage failure that aborts the run.

    Stages return this instead of their report; the orchestrator stops at the
    first one it sees and nothing already done is rolled back.
    """

    kind: FatalKind
    detail: str
    path: Path | None = None

    def describe(self) -> str:
        if self.path is None:
            return f"{self.kind}: {self.detail}"
        return f"{self.kind}: {self.detail} (path={self.path})"
