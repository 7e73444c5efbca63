"""
Loader for templar.yaml.

A missing file yields the defaults; a present file must be a YAML mapping
with only known keys.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import DEFAULT_CONFIG, TemplarConfig
from ..errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "templar.yaml"

_yaml = YAML(typ="safe")


def _read_yaml_map(path: Path) -> dict:
    """Reads a YAML file and returns its mapping."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def find_config(start: Path) -> Optional[Path]:
    """Returns templar.yaml in the given directory, if present."""
    candidate = start / CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_config(path: Optional[Path]) -> TemplarConfig:
    """
    Loads configuration from a file.

    Args:
        path: Config file, or None for defaults

    Returns:
        Validated configuration with root made absolute relative to the
        config file's directory

    Raises:
        ConfigError: on unreadable, malformed or invalid configuration
    """
    if path is None:
        return DEFAULT_CONFIG

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    raw = _read_yaml_map(path)
    try:
        cfg = TemplarConfig.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigError(f"Invalid config {path} ({fields}): {e}") from e

    root = cfg.root if cfg.root.is_absolute() else (path.parent / cfg.root).resolve()
    logger.debug("Loaded config %s (root=%s)", path, root)
    return cfg.model_copy(update={"root": root})


__all__ = ["CONFIG_FILE", "find_config", "load_config"]
