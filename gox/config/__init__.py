"""
Configuration file support for gox.
"""

from gox.config.parser import GoxConfig, find_config, parse_config

__all__ = ["GoxConfig", "find_config", "parse_config"]
