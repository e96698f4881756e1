"""
Build options, per-platform overrides and parallel dispatch.
"""

from gox.build.options import BuildOptions, ResolvedOptions, render_output_path
from gox.build.overrides import resolve_override, resolve_options
from gox.build.dispatcher import (
    BuildReport,
    CompileUnit,
    Dispatcher,
    ErrorRecord,
    resolve_parallelism,
)

__all__ = [
    "BuildOptions",
    "ResolvedOptions",
    "render_output_path",
    "resolve_override",
    "resolve_options",
    "BuildReport",
    "CompileUnit",
    "Dispatcher",
    "ErrorRecord",
    "resolve_parallelism",
]
