"""
Per-platform flag overrides read from the environment.

For a platform ``linux/arm`` and category ``LDFLAGS`` the variable consulted
is ``GOX_LINUX_ARM_LDFLAGS``. Its value is appended after the global flags so
that global flags always come first on the command line.
"""

import logging
import os
from typing import Mapping, Optional

from gox.build.options import BuildOptions, ResolvedOptions
from gox.platforms.registry import Platform

logger = logging.getLogger(__name__)

ENV_PREFIX = "GOX"

CATEGORIES = ("GCFLAGS", "LDFLAGS", "ASMFLAGS")


def override_variable(category: str, platform: Platform, prefix: str = ENV_PREFIX) -> str:
    """
    Environment variable name for a category/platform override.

    Example:
        >>> override_variable("LDFLAGS", Platform("linux", "arm"))
        'GOX_LINUX_ARM_LDFLAGS'
    """
    category = category.upper()
    if category not in CATEGORIES:
        raise ValueError(
            f"Unknown override category: {category}. "
            f"Supported: {', '.join(CATEGORIES)}"
        )
    return f"{prefix}_{platform.os}_{platform.arch}_{category}".upper()


def resolve_override(
    category: str,
    platform: Platform,
    global_default: str,
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = ENV_PREFIX,
) -> str:
    """
    Resolve one flag category for one platform.

    Args:
        category: One of GCFLAGS, LDFLAGS, ASMFLAGS
        platform: Target platform
        global_default: Value given for all platforms
        environ: Environment to read (defaults to ``os.environ``)
        prefix: Variable name prefix

    Returns:
        ``global_default`` when no override is set, otherwise the default
        followed by the override, separated by a space
    """
    if environ is None:
        environ = os.environ

    name = override_variable(category, platform, prefix)
    override = environ.get(name, "")
    if not override:
        return global_default

    logger.debug(f"{platform}: using {name}={override!r}")
    return " ".join(part for part in (global_default, override) if part)


def resolve_options(
    template: BuildOptions,
    platform: Platform,
    environ: Optional[Mapping[str, str]] = None,
) -> ResolvedOptions:
    """Apply all environment overrides for ``platform`` to ``template``."""
    return ResolvedOptions(
        ldflags=resolve_override("LDFLAGS", platform, template.ldflags, environ),
        gcflags=resolve_override("GCFLAGS", platform, template.gcflags, environ),
        asmflags=resolve_override("ASMFLAGS", platform, template.asmflags, environ),
        output_template=template.output_template,
        tags=template.tags,
        cgo=template.cgo,
        rebuild=template.rebuild,
    )


__all__ = [
    "ENV_PREFIX",
    "CATEGORIES",
    "override_variable",
    "resolve_override",
    "resolve_options",
]
