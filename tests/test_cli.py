"""Tests for the typer CLI."""

import logging

import pytest
import yaml
from typer.testing import CliRunner

from conftest import RecordingTransport
from deep_archive_setup import cli
from deep_archive_setup.config import load_settings
from deep_archive_setup.pipeline import BootstrapRunOptions
from deep_archive_setup.probe import StaticAvailability

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, workdir):
    monkeypatch.chdir(workdir)
    monkeypatch.setattr(cli, "configure_logging", lambda log_file=None: logging.getLogger("deep_archive_setup"))
    monkeypatch.setattr(cli, "detect_platform", lambda: "debian")


def _use_fakes(monkeypatch, availability, transport):
    monkeypatch.setattr(
        cli,
        "_default_run_options",
        lambda: BootstrapRunOptions(availability=availability, transports=[transport], platform_id="debian"),
    )


def test_bare_invocation_runs_bootstrap(monkeypatch, workdir, all_tools):
    transport = RecordingTransport()
    _use_fakes(monkeypatch, all_tools, transport)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0, result.output
    assert "state: done" in result.output
    assert "artifacts_downloaded: 2" in result.output
    assert (workdir / "models" / "nsfw.onnx").is_file()
    assert (workdir / ".output").is_dir()


def test_degraded_run_lists_install_hints(monkeypatch, workdir):
    _use_fakes(monkeypatch, StaticAvailability.of(["curl", "xorriso"]), RecordingTransport())

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0
    assert "missing_dependencies: ffmpeg" in result.output
    assert "sudo apt install ffmpeg" in result.output


def test_aborted_run_exits_with_one(monkeypatch, workdir, all_tools):
    _use_fakes(monkeypatch, all_tools, RecordingTransport(available=False))

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 1
    assert "state: aborted" in result.output
    assert not (workdir / "models" / "nsfw.onnx").exists()


def test_run_command_uses_config_file(monkeypatch, workdir, all_tools):
    transport = RecordingTransport()
    _use_fakes(monkeypatch, all_tools, transport)
    config_file = workdir / "custom.yaml"
    config_file.write_text(
        "artifacts:\n  - url: https://example.org/only.onnx\n    dest: weights/only.onnx\n",
        encoding="utf-8",
    )

    result = runner.invoke(cli.app, ["run", "--config-file", str(config_file)])

    assert result.exit_code == 0, result.output
    assert [url for url, _ in transport.calls] == ["https://example.org/only.onnx"]
    assert (workdir / "weights" / "only.onnx").is_file()


def test_invalid_settings_are_a_usage_error(workdir):
    config_file = workdir / "broken.yaml"
    config_file.write_text("transport:\n  preference: [ftp]\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--config-file", str(config_file)])

    assert result.exit_code == 2


def test_check_deps_reports_missing(monkeypatch):
    monkeypatch.setattr(cli, "PathLookup", lambda: StaticAvailability.of(["ffmpeg"]))

    result = runner.invoke(cli.app, ["check-deps"])

    assert result.exit_code == 0
    assert "present: ffmpeg" in result.output
    assert "missing: xorriso" in result.output
    assert "xorriso: sudo apt install xorriso" in result.output


def test_show_config_renders_yaml():
    result = runner.invoke(cli.app, ["show-config"])

    assert result.exit_code == 0
    rendered = yaml.safe_load(result.output)
    assert rendered["transport"]["preference"] == ["curl", "wget"]
    assert [dep["name"] for dep in rendered["dependencies"]] == ["ffmpeg", "xorriso"]


def test_locate_models_writes_env(workdir):
    models = workdir / "models"
    models.mkdir()
    (models / "nsfw.onnx").write_bytes(b"n")
    (models / "tagger.onnx").write_bytes(b"t")

    result = runner.invoke(cli.app, ["locate-models", "--write-env"])

    assert result.exit_code == 0, result.output
    assert "source: search" in result.output
    assert "NSFW_MODEL_PATH=" in (workdir / ".env").read_text(encoding="utf-8")


def test_locate_models_missing_exits_with_one():
    result = runner.invoke(cli.app, ["locate-models"])

    assert result.exit_code == 1


def test_aborted_run_reports_artifacts_already_downloaded(monkeypatch, workdir, all_tools):
    second = load_settings(base_dir=workdir).artifacts[1]
    transport = RecordingTransport(fail_urls={second.url})
    _use_fakes(monkeypatch, all_tools, transport)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 1
    assert "artifacts_downloaded: 1" in result.output
    assert (workdir / "models" / "nsfw.onnx").is_file()


def test_entry_script_is_the_invoking_script(monkeypatch, workdir):
    script = workdir / "setup.sh"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    monkeypatch.setattr(cli.sys, "argv", [str(script)])

    assert cli._entry_script() == script


def test_entry_script_skipped_under_python_m(monkeypatch):
    monkeypatch.setattr(cli.sys, "argv", [str(cli.PACKAGE_DIR / "__main__.py")])

    assert cli._entry_script() is None
