"""Shared fixtures and fakes for bootstrap tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from deep_archive_setup.config import AppSettings
from deep_archive_setup.fetch.transports import TransferOutcome
from deep_archive_setup.probe.commands import CommandAvailability, StaticAvailability


@dataclass
class RecordingTransport:
    """Fake transport that writes ``payload`` and records every call."""

    name: str = "fake"
    available: bool = True
    payload: bytes = b"onnx-bytes"
    fail_urls: set[str] = field(default_factory=set)
    calls: list[tuple[str, Path]] = field(default_factory=list)

    def is_available(self, availability: CommandAvailability) -> bool:
        return self.available

    def fetch(self, url: str, dest: Path) -> TransferOutcome:
        self.calls.append((url, dest))
        if url in self.fail_urls:
            dest.write_bytes(self.payload[:3])
            return TransferOutcome(ok=False, detail="simulated failure")
        dest.write_bytes(self.payload)
        return TransferOutcome(ok=True, detail="simulated success")


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch, tmp_path):
    """Keep repository YAML and host env vars out of settings loading."""

    monkeypatch.setenv("DEEP_ARCHIVE_SETTINGS_FILE", str(tmp_path / "no-such-settings.yaml"))
    for name in ("DEEP_ARCHIVE_LOG_FILE", "DEEP_ARCHIVE_MODELS_ENV_FILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workdir(tmp_path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def settings(workdir) -> AppSettings:
    return AppSettings().resolved(workdir)


@pytest.fixture
def all_tools() -> StaticAvailability:
    return StaticAvailability.of(["ffmpeg", "xorriso", "curl", "wget"])


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
