"""
Build options shared by every compile, and their per-platform resolution.

``BuildOptions`` holds the global values given on the command line.
``ResolvedOptions`` is the frozen copy handed to a single compile, after
per-platform environment overrides have been applied.
"""

import posixpath
import string
from dataclasses import dataclass

from gox.core.exceptions import InvalidTemplateError
from gox.platforms.registry import Platform

DEFAULT_OUTPUT_TEMPLATE = "{Dir}_{OS}_{Arch}"

TEMPLATE_VARIABLES = ("Dir", "OS", "Arch", "ImportPath")


@dataclass(frozen=True)
class BuildOptions:
    """Global build options, before per-platform overrides."""

    ldflags: str = ""
    gcflags: str = ""
    asmflags: str = ""
    tags: str = ""
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    cgo: bool = False
    rebuild: bool = False


@dataclass(frozen=True)
class ResolvedOptions:
    """Options for one compile; owned by a single CompileUnit."""

    ldflags: str
    gcflags: str
    asmflags: str
    output_template: str
    tags: str
    cgo: bool
    rebuild: bool


def validate_template(template: str) -> None:
    """
    Check that ``template`` only uses known variables.

    Raises:
        InvalidTemplateError: If the template is malformed or names an
                              unknown variable
    """
    try:
        fields = [f for _, f, _, _ in string.Formatter().parse(template) if f is not None]
    except ValueError as e:
        raise InvalidTemplateError(f"Invalid output template {template!r}: {e}") from e

    for name in fields:
        if name not in TEMPLATE_VARIABLES:
            raise InvalidTemplateError(
                f"Invalid output template {template!r}: unknown variable {{{name}}}. "
                f"Available: {', '.join(TEMPLATE_VARIABLES)}"
            )


def render_output_path(template: str, package: str, platform: Platform) -> str:
    """
    Render the output path for one package and platform.

    The result is the template expanded as-is; executable suffixes are added
    by the toolchain when it builds.

    Args:
        template: Output template, e.g. ``"{Dir}_{OS}_{Arch}"``
        package: Package import path (``Dir`` is its last element)
        platform: Target platform

    Returns:
        Output path

    Example:
        >>> render_output_path("{Dir}_{OS}_{Arch}", "app", Platform("windows", "386"))
        'app_windows_386'
    """
    validate_template(template)
    values = {
        "Dir": posixpath.basename(package.rstrip("/")) or package,
        "OS": platform.os,
        "Arch": platform.arch,
        "ImportPath": package,
    }
    try:
        return template.format_map(values)
    except (KeyError, IndexError, ValueError) as e:
        raise InvalidTemplateError(f"Invalid output template {template!r}: {e}") from e


__all__ = [
    "DEFAULT_OUTPUT_TEMPLATE",
    "TEMPLATE_VARIABLES",
    "BuildOptions",
    "ResolvedOptions",
    "validate_template",
    "render_output_path",
]
