"""Tests for dependency probing and platform detection."""

import pytest

from deep_archive_setup.config import DependencyConfig
from deep_archive_setup.probe import (
    PathLookup,
    StaticAvailability,
    check_dependencies,
    install_hint,
    platform_from_os_release,
)
from deep_archive_setup.probe.dependencies import GENERIC_HINT
from deep_archive_setup.probe.platform_id import KNOWN_PLATFORMS, detect_platform


@pytest.fixture
def dependencies():
    return [
        DependencyConfig(name="ffmpeg", install_hints={"debian": "sudo apt install ffmpeg"}),
        DependencyConfig(name="xorriso", install_hints={"debian": "sudo apt install xorriso"}),
    ]


class TestCheckDependencies:
    def test_all_present(self, dependencies):
        report = check_dependencies(dependencies, StaticAvailability.of(["ffmpeg", "xorriso"]), "debian")

        assert report.present == {"ffmpeg", "xorriso"}
        assert report.missing == frozenset()
        assert report.hints == ()
        assert not report.degraded

    def test_missing_dependencies_are_collected_not_raised(self, dependencies):
        report = check_dependencies(dependencies, StaticAvailability.of([]), "debian")

        assert report.missing == {"ffmpeg", "xorriso"}
        assert report.degraded
        assert dict(report.hints) == {
            "ffmpeg": "sudo apt install ffmpeg",
            "xorriso": "sudo apt install xorriso",
        }

    def test_unknown_platform_falls_back_to_generic_hint(self, dependencies):
        report = check_dependencies(dependencies, StaticAvailability.of(["ffmpeg"]), "plan9")

        assert report.missing == {"xorriso"}
        assert report.hints == (("xorriso", GENERIC_HINT.format(name="xorriso")),)

    def test_missing_dependency_logged_as_warning(self, dependencies, caplog):
        with caplog.at_level("WARNING"):
            check_dependencies(dependencies, StaticAvailability.of(["xorriso"]), "debian")

        assert any("dependencies.missing name=ffmpeg" in record.getMessage() for record in caplog.records)


def test_install_hint_prefers_platform_entry():
    dependency = DependencyConfig(name="ffmpeg", install_hints={"macos": "brew install ffmpeg"})

    assert install_hint(dependency, "macos") == "brew install ffmpeg"
    assert "ffmpeg" in install_hint(dependency, "debian")


def test_path_lookup_uses_search_path(tmp_path):
    tool = tmp_path / "fake-tool"
    tool.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    tool.chmod(0o755)

    lookup = PathLookup(search_path=str(tmp_path))

    assert lookup.is_available("fake-tool")
    assert not lookup.is_available("definitely-not-installed-tool")


@pytest.mark.parametrize(
    ("os_release", "expected"),
    [
        ({"ID": "ubuntu", "ID_LIKE": "debian"}, "debian"),
        ({"ID": "debian"}, "debian"),
        ({"ID": "fedora"}, "fedora"),
        ({"ID": "rocky", "ID_LIKE": "rhel centos fedora"}, "fedora"),
        ({"ID": "manjaro", "ID_LIKE": "arch"}, "arch"),
        ({"ID": "alpine"}, None),
    ],
)
def test_platform_from_os_release(os_release, expected):
    assert platform_from_os_release(os_release) == expected


def test_detect_platform_on_macos(monkeypatch):
    monkeypatch.setattr("deep_archive_setup.probe.platform_id.sys.platform", "darwin")

    assert detect_platform() == "macos"


def test_detect_platform_without_os_release(monkeypatch):
    def _missing():
        raise OSError("no os-release")

    monkeypatch.setattr("deep_archive_setup.probe.platform_id.sys.platform", "linux")
    monkeypatch.setattr("deep_archive_setup.probe.platform_id.platform.freedesktop_os_release", _missing)

    assert detect_platform() == "linux"


def test_detect_platform_maps_linux_family(monkeypatch):
    monkeypatch.setattr("deep_archive_setup.probe.platform_id.sys.platform", "linux")
    monkeypatch.setattr(
        "deep_archive_setup.probe.platform_id.platform.freedesktop_os_release",
        lambda: {"ID": "ubuntu", "ID_LIKE": "debian"},
    )

    assert detect_platform() in KNOWN_PLATFORMS
