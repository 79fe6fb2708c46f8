"""Locate downloaded models and record their paths for the media pipeline.

The pipeline reads ``NSFW_MODEL_PATH`` and ``TAGGER_MODEL_PATH`` from a
``.env`` file. When the file is missing or incomplete the models are searched
for under the working directory (then its parent) and the result can be
written back.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator
from uuid import uuid4

LOGGER = logging.getLogger(__name__)

NSFW_MODEL_KEY = "NSFW_MODEL_PATH"
TAGGER_MODEL_KEY = "TAGGER_MODEL_PATH"
NSFW_MODEL_FILE = "nsfw.onnx"
TAGGER_MODEL_FILE = "tagger.onnx"
DEFAULT_SEARCH_DEPTH = 5


class ModelNotFoundError(FileNotFoundError):
    """A model file could not be found near the search root."""


@dataclass(frozen=True, slots=True)
class ModelPaths:
    """Resolved model file locations."""

    nsfw: Path
    tagger: Path
    source: str


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def load_model_paths(env_file: Path) -> ModelPaths | None:
    """Read both model keys from ``env_file``; ``None`` when absent or incomplete."""

    if not env_file.is_file():
        return None
    values = _parse_env_lines(env_file.read_text(encoding="utf-8"))
    nsfw = values.get(NSFW_MODEL_KEY)
    tagger = values.get(TAGGER_MODEL_KEY)
    if not nsfw or not tagger:
        return None
    return ModelPaths(nsfw=Path(nsfw), tagger=Path(tagger), source=str(env_file))


def _walk_limited(root: Path, max_depth: int) -> Iterator[Path]:
    """Yield files under ``root`` in sorted walk order, at most ``max_depth`` levels deep."""

    root_depth = len(root.parts)
    for current, dirnames, filenames in os.walk(root):
        current_path = Path(current)
        depth = len(current_path.parts) - root_depth
        dirnames.sort()
        if depth >= max_depth - 1:
            dirnames[:] = []
        for filename in sorted(filenames):
            yield current_path / filename


def find_file(file_name: str, search_root: Path, max_depth: int = DEFAULT_SEARCH_DEPTH) -> Path:
    """Find ``file_name`` under ``search_root``, falling back to its parent directory."""

    roots = [search_root]
    if search_root.parent != search_root:
        roots.append(search_root.parent)
    for root in roots:
        for candidate in _walk_limited(root, max_depth):
            if candidate.name == file_name:
                return candidate
    raise ModelNotFoundError(f"Could not find file '{file_name}' in nearby directories of {search_root}.")


def _format_env_value(value: str) -> str:
    if not any(char.isspace() or char in "#\"'" for char in value):
        return value
    quote = "'" if '"' in value else '"'
    return f"{quote}{value}{quote}"


def write_model_paths(env_file: Path, paths: ModelPaths) -> Path:
    """Write the model keys into ``env_file``.

    Other lines, comments included, are kept verbatim. An existing model key
    is rewritten in place; missing ones are appended. Values with whitespace,
    ``#`` or quotes are written quoted.
    """

    updates = {
        NSFW_MODEL_KEY: str(paths.nsfw),
        TAGGER_MODEL_KEY: str(paths.tagger),
    }
    lines: list[str] = []
    if env_file.is_file():
        for raw_line in env_file.read_text(encoding="utf-8").splitlines():
            key = raw_line.split("=", 1)[0].strip() if "=" in raw_line else ""
            if key in (NSFW_MODEL_KEY, TAGGER_MODEL_KEY):
                if key in updates:
                    lines.append(f"{key}={_format_env_value(updates.pop(key))}")
                continue
            lines.append(raw_line)
    lines.extend(f"{key}={_format_env_value(value)}" for key, value in updates.items())

    env_file.parent.mkdir(parents=True, exist_ok=True)
    temp_path = env_file.parent / f".{env_file.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        os.replace(temp_path, env_file)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return env_file


def resolve_model_paths(
    env_file: Path,
    search_root: Path,
    *,
    max_depth: int = DEFAULT_SEARCH_DEPTH,
    write_env: bool = False,
    logger: logging.Logger | None = None,
) -> ModelPaths:
    """Return model paths from ``env_file`` or, failing that, from a filesystem search."""

    effective_logger = logger or LOGGER
    loaded = load_model_paths(env_file)
    if loaded is not None:
        effective_logger.info("model_paths.loaded env_file=%s", env_file)
        return loaded

    effective_logger.info("model_paths.searching root=%s max_depth=%s", search_root, max_depth)
    found = ModelPaths(
        nsfw=find_file(NSFW_MODEL_FILE, search_root, max_depth),
        tagger=find_file(TAGGER_MODEL_FILE, search_root, max_depth),
        source="search",
    )
    effective_logger.info("model_paths.found nsfw=%s tagger=%s", found.nsfw, found.tagger)
    if write_env:
        write_model_paths(env_file, found)
        effective_logger.info("model_paths.saved env_file=%s", env_file)
    return found
