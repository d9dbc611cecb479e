"""
jsongauge.configs.loader

Load the YAML exporter configuration and validate it into an ExporterConfig.

Every failure (missing file, YAML syntax, shape, validation) surfaces as a
ConfigError; the exporter refuses to start on a partial configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from jsongauge.schemas.config import ExporterConfig, FileSpec

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the exporter configuration cannot be loaded or is invalid."""


def load_config(path: str | Path) -> ExporterConfig:
    """
    Load and validate an exporter configuration.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigError: If the file is missing, malformed or fails validation.
    """
    data = _read_yaml(Path(path))
    return _validate(data, path)


def load_config_with_files(path: str | Path, files: Iterable[FileSpec]) -> ExporterConfig:
    """
    Load a single-group base configuration and supply its files externally.

    The ``files`` section of the YAML (if any) is replaced by ``files``, keyed
    by file path. Only configurations declaring exactly one group qualify.

    Raises:
        ConfigError: If the base config declares more or fewer than one group,
            or the result fails validation.
    """
    data = _read_yaml(Path(path))

    groups = data.get("groups")
    if not isinstance(groups, dict) or len(groups) != 1:
        count = len(groups) if isinstance(groups, dict) else 0
        raise ConfigError(
            f"{path}: only a single group is supported with external files, found {count}"
        )

    group_key = next(iter(groups))
    group = dict(groups[group_key] or {})
    group["files"] = {
        f.file_path: f.model_dump(by_alias=True) for f in files
    }
    data = {**data, "groups": {group_key: group}}

    logger.info(f"Using {len(group['files'])} external file(s) for group '{group_key}'")
    return _validate(data, path)


def format_validation_error(error: ValidationError) -> list[str]:
    """Render pydantic errors as ``dotted.yaml.keys: message`` lines."""
    lines = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{loc}: {err['msg']}")
    return lines


def _validate(data: dict[str, Any], path: str | Path) -> ExporterConfig:
    try:
        return ExporterConfig.model_validate(data)
    except ValidationError as ve:
        issues = format_validation_error(ve)
        raise ConfigError(
            f"{path}: invalid configuration:\n" + "\n".join(f"  - {i}" for i in issues)
        ) from ve


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config must be a mapping")
    return data
