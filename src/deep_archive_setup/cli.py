"""Typer CLI entrypoint for deep_archive_setup."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from deep_archive_setup.config import AppSettings, load_settings
from deep_archive_setup.logging_utils import configure_logging
from deep_archive_setup.model_paths import ModelNotFoundError, resolve_model_paths
from deep_archive_setup.pipeline import BootstrapResult, BootstrapRunOptions, run_bootstrap
from deep_archive_setup.probe.commands import PathLookup
from deep_archive_setup.probe.dependencies import check_dependencies
from deep_archive_setup.probe.platform_id import detect_platform

app = typer.Typer(
    add_completion=False,
    help="Prepare this machine for the Deep Archive media pipeline.",
)

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config-file",
    help="Optional settings YAML path.",
    exists=False,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
    log_file: Path | None = None,
) -> tuple[AppSettings, logging.Logger]:
    try:
        settings = load_settings(config_file=config_file)
    except ValidationError as exc:
        raise typer.BadParameter(f"invalid settings: {exc}") from exc
    if configure:
        logger = configure_logging(log_file or settings.log_file)
    else:
        logger = logging.getLogger("deep_archive_setup")
    return settings, logger


PACKAGE_DIR = Path(__file__).resolve().parent


def _entry_script() -> Path | None:
    """Return the invoking script, or ``None`` when launched via ``python -m``."""

    if not sys.argv or not sys.argv[0]:
        return None
    script = Path(sys.argv[0]).resolve()
    if script.is_relative_to(PACKAGE_DIR):
        return None
    return script


def _default_run_options() -> BootstrapRunOptions:
    return BootstrapRunOptions(availability=PathLookup(), entry_script=_entry_script())


def _echo_result(result: BootstrapResult) -> None:
    typer.echo(f"state: {result.state.value}")
    if result.directories is not None:
        typer.echo(f"directories_created: {len(result.directories.created)}")
        typer.echo(f"directories_already_present: {len(result.directories.already_present)}")
    if result.artifacts is not None:
        typer.echo(f"transport: {result.artifacts.transport or 'none'}")
        typer.echo(f"artifacts_downloaded: {len(result.artifacts.downloaded)}")
        typer.echo(f"artifacts_already_satisfied: {len(result.artifacts.already_satisfied)}")
    if result.dependencies is not None:
        typer.echo(f"missing_dependencies: {','.join(sorted(result.warnings)) or 'none'}")
        for name, hint in result.dependencies.hints:
            typer.echo(f"  {name}: {hint}")
    if result.fatal is not None:
        typer.echo(f"fatal: {result.fatal.describe()}", err=True)
    typer.echo(f"exit_code: {result.exit_code}")


def _run(config_file: Path | None, log_file: Path | None) -> None:
    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True, log_file=log_file)
    result = run_bootstrap(settings, options=_default_run_options(), logger=logger)
    _echo_result(result)
    raise typer.Exit(code=result.exit_code)


@app.callback(invoke_without_command=True)
def bootstrap(ctx: typer.Context) -> None:
    """Run the full bootstrap when no subcommand is given."""

    if ctx.invoked_subcommand is None:
        _run(config_file=None, log_file=None)


@app.command("run")
def run(
    config_file: Path | None = CONFIG_FILE_OPTION,
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file.",
        dir_okay=False,
    ),
) -> None:
    """Provision directories, check dependencies and fetch missing models."""

    _run(config_file=config_file, log_file=log_file)


@app.command("check-deps")
def check_deps(config_file: Path | None = CONFIG_FILE_OPTION) -> None:
    """Probe required executables and print install hints for missing ones."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    platform_id = detect_platform()
    report = check_dependencies(settings.dependencies, PathLookup(), platform_id, logger=logger)
    typer.echo(f"platform: {platform_id}")
    typer.echo(f"present: {','.join(sorted(report.present)) or 'none'}")
    typer.echo(f"missing: {','.join(sorted(report.missing)) or 'none'}")
    for name, hint in report.hints:
        typer.echo(f"  {name}: {hint}")


@app.command("show-config")
def show_config(config_file: Path | None = CONFIG_FILE_OPTION) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("locate-models")
def locate_models(
    write_env: bool = typer.Option(
        False,
        "--write-env",
        help="Save the located paths into the model .env file.",
    ),
    max_depth: int = typer.Option(5, "--max-depth", min=1, help="Directory levels to search."),
    config_file: Path | None = CONFIG_FILE_OPTION,
) -> None:
    """Resolve model file paths for the media pipeline."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    try:
        paths = resolve_model_paths(
            settings.models_env_file,
            Path.cwd(),
            max_depth=max_depth,
            write_env=write_env,
            logger=logger,
        )
    except ModelNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"nsfw: {paths.nsfw}")
    typer.echo(f"tagger: {paths.tagger}")
    typer.echo(f"source: {paths.source}")


def main() -> None:
    """CLI script entrypoint."""

    app()


if __name__ == "__main__":
    main()
