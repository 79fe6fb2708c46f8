"""External executable probing and platform detection."""

from deep_archive_setup.probe.commands import CommandAvailability, PathLookup, StaticAvailability
from deep_archive_setup.probe.dependencies import DependencyReport, check_dependencies, install_hint
from deep_archive_setup.probe.platform_id import detect_platform, platform_from_os_release

__all__ = [
    "CommandAvailability",
    "PathLookup",
    "StaticAvailability",
    "DependencyReport",
    "check_dependencies",
    "install_hint",
    "detect_platform",
    "platform_from_os_release",
]
