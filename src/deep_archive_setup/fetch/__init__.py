"""Artifact download stage and its transports."""

from deep_archive_setup.fetch.downloader import ArtifactReport, ArtifactResult, fetch_artifacts
from deep_archive_setup.fetch.transports import (
    CommandTransport,
    HttpxTransport,
    TransferOutcome,
    Transport,
    build_transports,
    curl_transport,
    select_transport,
    wget_transport,
)

__all__ = [
    "ArtifactReport",
    "ArtifactResult",
    "fetch_artifacts",
    "CommandTransport",
    "HttpxTransport",
    "TransferOutcome",
    "Transport",
    "build_transports",
    "curl_transport",
    "select_transport",
    "wget_transport",
]
