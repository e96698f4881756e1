"""
Shared utilities for CLI commands.

Provides configuration loading, option merging and consistent error output
for the gox commands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from gox.config.parser import GoxConfig, find_config, parse_config
from gox.toolchain.go import GoToolchain

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(project_root: Path, config_file: Optional[Path] = None) -> GoxConfig:
    """
    Load the configuration for a run.

    Args:
        project_root: Directory searched for ``gox.yaml``
        config_file: Explicit configuration file (must exist)

    Returns:
        Parsed configuration, or defaults when there is no file

    Raises:
        ConfigError: If the file is missing (when explicit) or invalid
    """
    path = find_config(project_root, config_file)
    if path is None:
        return GoxConfig()
    return parse_config(path)


def pick(cli_value, config_value, default):
    """Return the first of command-line value, config value, default that is set."""
    if cli_value is not None:
        return cli_value
    if config_value is not None:
        return config_value
    return default


def pick_list(cli_values, config_values):
    """Filters given on the command line replace the configured ones."""
    if cli_values:
        return list(cli_values)
    return list(config_values or [])


# ============================================================================
# Toolchain
# ============================================================================


def load_toolchain(command: str, project_root: Path) -> Tuple[GoToolchain, str]:
    """
    Locate the Go command and read its version.

    Raises:
        MissingToolchainError: If the command is not on the PATH
        InvalidVersionError: If the version cannot be read
    """
    toolchain = GoToolchain(command, working_dir=project_root)
    toolchain.find_executable()
    version = toolchain.version()
    logger.debug(f"Go toolchain version: {version}")
    return toolchain, version


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)
