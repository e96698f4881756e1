"""
Build command implementation.

Cross-compiles the requested packages for every selected platform.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List

from gox.build.dispatcher import BuildReport, Dispatcher, resolve_parallelism
from gox.build.options import DEFAULT_OUTPUT_TEMPLATE, BuildOptions, validate_template
from gox.cli.utils import load_toolchain, pick, pick_list, print_warning
from gox.config.parser import GoxConfig
from gox.core.exceptions import EmptyPlatformSetError, PackageDiscoveryError
from gox.platforms.registry import supported_platforms
from gox.platforms.selector import parse_osarch_spec, parse_spec, select_platforms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildSettings:
    """Effective settings after merging the config file and command line."""

    packages: List[str]
    os: List[str]
    arch: List[str]
    osarch: List[str]
    options: BuildOptions
    parallel: int
    gocmd: str


def resolve_settings(args, config: GoxConfig) -> BuildSettings:
    """Merge command-line arguments over configuration file values."""
    options = BuildOptions(
        ldflags=pick(args.ldflags, config.ldflags, ""),
        gcflags=pick(args.gcflags, config.gcflags, ""),
        asmflags=pick(args.asmflags, config.asmflags, ""),
        tags=pick(args.tags, config.tags, ""),
        output_template=pick(args.output, config.output, DEFAULT_OUTPUT_TEMPLATE),
        cgo=pick(args.cgo, config.cgo, False),
        rebuild=pick(args.rebuild, config.rebuild, False),
    )
    return BuildSettings(
        packages=pick_list(args.packages, config.packages) or ["."],
        os=pick_list(args.os, config.os),
        arch=pick_list(args.arch, config.arch),
        osarch=pick_list(args.osarch, config.osarch),
        options=options,
        parallel=pick(args.parallel, config.parallel, -1),
        gocmd=pick(args.gocmd, config.gocmd, "go"),
    )


def report_failures(report: BuildReport) -> None:
    """Print every recorded failure to stderr."""
    print(f"\n{len(report.failures)} errors occurred:", file=sys.stderr)
    for failure in report.failures:
        print(f"--> {failure}", file=sys.stderr)


def run(args, config: GoxConfig) -> int:
    """
    Run the build command.

    Args:
        args: Parsed command-line arguments
        config: Loaded configuration file

    Returns:
        Exit code (0 for success, 1 on any failure, 130 if interrupted)

    Raises:
        GoxError: On any fatal error detected before dispatch
    """
    settings = resolve_settings(args, config)
    project_root = Path(args.project_root)

    # Inputs are validated before the toolchain is touched
    validate_template(settings.options.output_template)
    os_spec = parse_spec(settings.os)
    arch_spec = parse_spec(settings.arch)
    osarch_spec = parse_osarch_spec(settings.osarch)

    toolchain, version = load_toolchain(settings.gocmd, project_root)

    selection = select_platforms(os_spec, arch_spec, osarch_spec, supported_platforms(version))
    for warning in selection.warnings:
        print_warning(warning)
    if selection.empty:
        raise EmptyPlatformSetError()

    packages = toolchain.main_packages(settings.packages)
    if not packages:
        raise PackageDiscoveryError(
            f"No main packages found in: {' '.join(settings.packages)}"
        )

    parallelism = resolve_parallelism(settings.parallel)
    logger.info(f"Number of parallel builds: {parallelism}\n")

    dispatcher = Dispatcher(toolchain.compile, parallelism)
    report = dispatcher.run(packages, selection.platforms, settings.options)

    if report.failures:
        report_failures(report)
        return 1
    if report.cancelled:
        logger.warning(f"Build cancelled, {report.skipped} build(s) skipped")
        return 130

    logger.debug(f"Built {report.compiled} of {report.total} targets")
    return 0
