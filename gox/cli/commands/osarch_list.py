"""
OS/Arch list command implementation.

Shows the platforms the installed Go toolchain can build for.
"""

import logging
from pathlib import Path

from gox.cli.utils import load_toolchain, pick
from gox.config.parser import GoxConfig
from gox.platforms.registry import denied_platforms, listed_platforms, supported_platforms

logger = logging.getLogger(__name__)


def run(args, config: GoxConfig) -> int:
    """
    Run the osarch-list command.

    Args:
        args: Parsed command-line arguments
        config: Loaded configuration file

    Returns:
        Exit code (0 for success)
    """
    gocmd = pick(args.gocmd, config.gocmd, "go")
    _, version = load_toolchain(gocmd, Path(args.project_root))

    supported = supported_platforms(version)
    listed = set(listed_platforms(version))
    denied = [entry for entry in denied_platforms(version) if entry.platform in listed]

    print(f"Supported OS/Arch combinations for {version} are shown below.\n")
    for platform in supported:
        print(f"    {platform}")

    if denied:
        print("\nListed by Go but not built by gox:\n")
        for entry in denied:
            print(f"    {str(entry.platform):<15}\t({entry.reason})")

    return 0
