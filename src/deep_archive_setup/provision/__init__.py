"""Working-directory provisioning."""

from deep_archive_setup.provision.directories import DirectoryReport, ensure_directories

__all__ = [
    "DirectoryReport",
    "ensure_directories",
]
