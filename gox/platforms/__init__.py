"""
Platform registry and selection for gox.
"""

from gox.platforms.registry import (
    Platform,
    supported_platforms,
    listed_platforms,
    denied_platforms,
    parse_version,
)
from gox.platforms.selector import (
    PlatformSpec,
    SelectionResult,
    parse_spec,
    parse_osarch_spec,
    select_platforms,
)

__all__ = [
    "Platform",
    "supported_platforms",
    "listed_platforms",
    "denied_platforms",
    "parse_version",
    "PlatformSpec",
    "SelectionResult",
    "parse_spec",
    "parse_osarch_spec",
    "select_platforms",
]
