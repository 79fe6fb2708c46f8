"""Derive the platform identifier used to key install hints."""

from __future__ import annotations

import platform
import sys

KNOWN_PLATFORMS: tuple[str, ...] = ("debian", "macos", "fedora", "arch")

# os-release IDs mapped onto the package-manager family they install with.
_OS_RELEASE_FAMILIES: dict[str, str] = {
    "debian": "debian",
    "ubuntu": "debian",
    "linuxmint": "debian",
    "pop": "debian",
    "fedora": "fedora",
    "rhel": "fedora",
    "centos": "fedora",
    "arch": "arch",
    "manjaro": "arch",
    "endeavouros": "arch",
}


def platform_from_os_release(os_release: dict[str, str]) -> str | None:
    """Map an os-release mapping (``ID`` / ``ID_LIKE``) to a known platform."""

    candidates = [os_release.get("ID", "")]
    candidates.extend(os_release.get("ID_LIKE", "").split())
    for candidate in candidates:
        family = _OS_RELEASE_FAMILIES.get(candidate.strip().lower())
        if family is not None:
            return family
    return None


def detect_platform() -> str:
    """Return one of ``KNOWN_PLATFORMS``, or the raw ``sys.platform`` value."""

    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        try:
            os_release = platform.freedesktop_os_release()
        except OSError:
            return "linux"
        return platform_from_os_release(dict(os_release)) or "linux"
    return sys.platform
