"""
Core functionality for gox.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    HostInfo,
    detect_host,
    cpu_count,
    clear_host_cache,
)

from .exceptions import (
    GoxError,
    ToolchainError,
    MissingToolchainError,
    InvalidVersionError,
    PackageDiscoveryError,
    CompileError,
    InvalidInputError,
    InvalidFilterTokenError,
    InvalidTemplateError,
    EmptyPlatformSetError,
    ConfigError,
)

__all__ = [
    # Platform
    "HostInfo",
    "detect_host",
    "cpu_count",
    "clear_host_cache",
    # Exceptions
    "GoxError",
    "ToolchainError",
    "MissingToolchainError",
    "InvalidVersionError",
    "PackageDiscoveryError",
    "CompileError",
    "InvalidInputError",
    "InvalidFilterTokenError",
    "InvalidTemplateError",
    "EmptyPlatformSetError",
    "ConfigError",
]
