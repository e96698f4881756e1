"""YAML configuration parser for gox.

A ``gox.yaml`` file supplies defaults for the command-line flags:

    os: linux darwin
    arch: "!arm"
    osarch:
      - windows/amd64
    ldflags: -s -w
    output: "dist/{OS}_{Arch}/{Dir}"
    parallel: 4
    packages:
      - ./cmd/...
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from gox.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "gox.yaml"


@dataclass
class GoxConfig:
    """Defaults loaded from a configuration file. None means not set."""

    os: List[str] = field(default_factory=list)
    arch: List[str] = field(default_factory=list)
    osarch: List[str] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)
    ldflags: Optional[str] = None
    gcflags: Optional[str] = None
    asmflags: Optional[str] = None
    tags: Optional[str] = None
    output: Optional[str] = None
    gocmd: Optional[str] = None
    parallel: Optional[int] = None
    cgo: Optional[bool] = None
    rebuild: Optional[bool] = None


_LIST_KEYS = ("os", "arch", "osarch", "packages")
_STRING_KEYS = ("ldflags", "gcflags", "asmflags", "tags", "output", "gocmd")
_BOOL_KEYS = ("cgo", "rebuild")


def find_config(project_root: Path, config_file: Optional[Path] = None) -> Optional[Path]:
    """
    Return the configuration file to load, if any.

    An explicit ``config_file`` must exist; otherwise ``gox.yaml`` in
    ``project_root`` is used when present.

    Raises:
        ConfigError: If ``config_file`` was given but does not exist
    """
    if config_file is not None:
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_file}")
        return config_file

    default = project_root / DEFAULT_CONFIG_NAME
    if default.exists():
        return default
    logger.debug(f"No {DEFAULT_CONFIG_NAME} in {project_root}")
    return None


def parse_config(config_path: Path) -> GoxConfig:
    """
    Parse a gox configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed configuration; an empty file yields all defaults

    Raises:
        ConfigError: If the file is unreadable, not valid YAML, or has
                     unknown keys or values of the wrong type
    """
    logger.debug(f"Loading configuration from {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return GoxConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> GoxConfig:
    """Parse and validate configuration data."""
    known = {f.name for f in fields(GoxConfig)}
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = GoxConfig()

    for key in _LIST_KEYS:
        if key in data and data[key] is not None:
            setattr(config, key, _as_list(key, data[key]))

    for key in _STRING_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string, got {type(value).__name__}")
        setattr(config, key, value)

    for key in _BOOL_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be true or false")
        setattr(config, key, value)

    parallel = data.get("parallel")
    if parallel is not None:
        # bool is an int subclass
        if isinstance(parallel, bool) or not isinstance(parallel, int):
            raise ConfigError("'parallel' must be an integer")
        config.parallel = parallel

    return config


def _as_list(key: str, value) -> List[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings")


__all__ = ["DEFAULT_CONFIG_NAME", "GoxConfig", "find_config", "parse_config"]
