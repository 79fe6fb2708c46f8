"""Download mechanisms and first-available transport selection."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Protocol, Sequence

import httpx

from deep_archive_setup.config import TransportConfig
from deep_archive_setup.probe.commands import CommandAvailability
from deep_archive_setup.results import Fatal

LOGGER = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True, slots=True)
class TransferOutcome:
    """Completion status reported by a transport for one URL."""

    ok: bool
    detail: str = ""


class Transport(Protocol):
    """Something that can fetch a URL into a local file."""

    name: str

    def is_available(self, availability: CommandAvailability) -> bool: ...

    def fetch(self, url: str, dest: Path) -> TransferOutcome: ...


@dataclass(frozen=True, slots=True)
class CommandTransport:
    """Runs an external downloader; success is a zero exit status."""

    name: str
    argv_template: tuple[str, ...]
    timeout_seconds: float | None = None

    def is_available(self, availability: CommandAvailability) -> bool:
        return availability.is_available(self.argv_template[0])

    def build_argv(self, url: str, dest: Path) -> list[str]:
        return [part.format(url=url, dest=str(dest)) for part in self.argv_template]

    def fetch(self, url: str, dest: Path) -> TransferOutcome:
        argv = self.build_argv(url, dest)
        try:
            completed = subprocess.run(argv, check=False, timeout=self.timeout_seconds)
        except FileNotFoundError as exc:
            return TransferOutcome(ok=False, detail=f"{self.name} not executable: {exc}")
        except subprocess.TimeoutExpired:
            return TransferOutcome(ok=False, detail=f"{self.name} timed out after {self.timeout_seconds}s")
        if completed.returncode != 0:
            return TransferOutcome(ok=False, detail=f"{self.name} exited with status {completed.returncode}")
        return TransferOutcome(ok=True, detail=f"{self.name} exited with status 0")


def curl_transport(timeout_seconds: float | None = None) -> CommandTransport:
    return CommandTransport(
        name="curl",
        argv_template=("curl", "-fL", "{url}", "-o", "{dest}"),
        timeout_seconds=timeout_seconds,
    )


def wget_transport(timeout_seconds: float | None = None) -> CommandTransport:
    return CommandTransport(
        name="wget",
        argv_template=("wget", "{url}", "-O", "{dest}"),
        timeout_seconds=timeout_seconds,
    )


@dataclass(frozen=True, slots=True)
class HttpxTransport:
    """In-process streaming download; always available."""

    name: str = "httpx"
    timeout_seconds: float | None = None
    user_agent: str = "deep-archive-setup/0.1"
    http_transport: httpx.BaseTransport | None = None

    def is_available(self, availability: CommandAvailability) -> bool:
        return True

    def build_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout_seconds),
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.http_transport,
        )

    def fetch(self, url: str, dest: Path) -> TransferOutcome:
        try:
            with self.build_client() as client, client.stream("GET", url) as response:
                if not response.is_success:
                    return TransferOutcome(ok=False, detail=f"HTTP {response.status_code}")
                with dest.open("wb") as handle:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        handle.write(chunk)
        except (httpx.HTTPError, OSError) as exc:
            return TransferOutcome(ok=False, detail=str(exc))
        return TransferOutcome(ok=True, detail=f"HTTP {response.status_code}")


TransportFactory = Callable[[TransportConfig], Transport]

TRANSPORT_FACTORIES: Mapping[str, TransportFactory] = {
    "curl": lambda cfg: curl_transport(cfg.download_timeout_seconds),
    "wget": lambda cfg: wget_transport(cfg.download_timeout_seconds),
    "httpx": lambda cfg: HttpxTransport(timeout_seconds=cfg.download_timeout_seconds, user_agent=cfg.user_agent),
}


def build_transports(config: TransportConfig) -> list[Transport]:
    """Instantiate transports in configured preference order."""

    return [TRANSPORT_FACTORIES[name](config) for name in config.preference]


def select_transport(
    transports: Sequence[Transport],
    availability: CommandAvailability,
    logger: logging.Logger | None = None,
) -> Transport | Fatal:
    """Return the first available transport, or a fatal outcome when none is."""

    effective_logger = logger or LOGGER
    for transport in transports:
        if transport.is_available(availability):
            effective_logger.info("transport.selected name=%s", transport.name)
            return transport
        effective_logger.info("transport.unavailable name=%s", transport.name)

    names = ", ".join(transport.name for transport in transports) or "none configured"
    effective_logger.error("transport.none_available tried=%s", names)
    return Fatal(kind="transport_unavailable", detail=f"no download transport available (tried: {names})")
