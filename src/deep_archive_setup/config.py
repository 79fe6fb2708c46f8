"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("configs/setup.yaml")
SETTINGS_FILE_ENV = "DEEP_ARCHIVE_SETTINGS_FILE"

TransportName = Literal["curl", "wget", "httpx"]


def _install_hints(packages: str) -> dict[str, str]:
    return {
        "debian": f"sudo apt install {packages}",
        "macos": f"brew install {packages}",
        "fedora": f"sudo dnf install {packages}",
        "arch": f"sudo pacman -S {packages}",
    }


class PathsConfig(BaseModel):
    """Working directories the media pipeline expects next to the invocation."""

    models_root: Path = Path("models")
    data_root: Path = Path("data")
    output_root: Path = Path(".output")

    def resolved(self, base_dir: Path) -> "PathsConfig":
        """Return a copy with relative paths resolved against ``base_dir``."""

        updates: dict[str, Path] = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            updates[field_name] = value if value.is_absolute() else (base_dir / value).resolve()
        return self.model_copy(update=updates)

    def required_directories(self) -> set[Path]:
        return {self.models_root, self.data_root, self.output_root}


class DependencyConfig(BaseModel):
    """An external executable probed on PATH, with per-platform install hints."""

    name: str = Field(min_length=1)
    install_hints: dict[str, str] = Field(default_factory=dict)


class ArtifactConfig(BaseModel):
    """A binary file fetched once from ``url`` into ``dest``."""

    url: str = Field(min_length=8)
    dest: Path


class TransportConfig(BaseModel):
    """Download mechanism preference and options."""

    preference: list[TransportName] = Field(default_factory=lambda: ["curl", "wget"], min_length=1)
    download_timeout_seconds: float | None = Field(default=None, gt=0)
    user_agent: str = Field(default="deep-archive-setup/0.1", min_length=1)


def _default_dependencies() -> list[DependencyConfig]:
    return [
        DependencyConfig(name="ffmpeg", install_hints=_install_hints("ffmpeg")),
        DependencyConfig(name="xorriso", install_hints=_install_hints("xorriso")),
    ]


def _default_artifacts() -> list[ArtifactConfig]:
    return [
        ArtifactConfig(
            url="https://huggingface.co/Falconsai/nsfw_image_detection/resolve/main/model.onnx",
            dest=Path("models/nsfw.onnx"),
        ),
        ArtifactConfig(
            url="https://huggingface.co/SmilingWolf/wd-v1-4-convnext-tagger-v2/resolve/main/model.onnx",
            dest=Path("models/tagger.onnx"),
        ),
    ]


class AppSettings(BaseSettings):
    """Top-level bootstrap settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    paths: PathsConfig = Field(default_factory=PathsConfig)
    dependencies: list[DependencyConfig] = Field(default_factory=_default_dependencies)
    artifacts: list[ArtifactConfig] = Field(default_factory=_default_artifacts)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    models_env_file: Path = Path(".env")
    log_file: Path | None = None

    model_config = SettingsConfigDict(
        env_prefix="DEEP_ARCHIVE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            yaml_settings,
            file_secret_settings,
        )

    def resolved(self, base_dir: Path) -> "AppSettings":
        """Return a copy with every relative path resolved against ``base_dir``."""

        def _resolve(path: Path) -> Path:
            return path if path.is_absolute() else (base_dir / path).resolve()

        artifacts = [item.model_copy(update={"dest": _resolve(item.dest)}) for item in self.artifacts]
        return self.model_copy(
            update={
                "paths": self.paths.resolved(base_dir),
                "artifacts": artifacts,
                "models_env_file": _resolve(self.models_env_file),
                "log_file": _resolve(self.log_file) if self.log_file is not None else None,
            }
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def resolve_settings_file(override: Path | None = None, base_dir: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = ((base_dir or Path.cwd()) / chosen).resolve()
    return chosen


def load_settings(config_file: Path | None = None, base_dir: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides.

    The YAML file is optional. Relative paths are resolved against ``base_dir``,
    which defaults to the current working directory.
    """

    working_dir = (base_dir or Path.cwd()).resolve()
    settings_file = resolve_settings_file(config_file, base_dir=working_dir)
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    return settings.resolved(working_dir)
