"""
gox CLI argument parser.

This module implements the command-line interface for gox using argparse.
Options accept both the single-dash spelling used by the Go toolchain
(``-os``, ``-osarch-list``) and a double-dash spelling (``--os``).
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gox.cli.utils import load_config
from gox.core.exceptions import GoxError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("gox")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

DESCRIPTION = """\
gox cross-compiles Go applications in parallel.

If no specific operating systems or architectures are specified, gox
will build for all pairs supported by your version of Go.
"""

EPILOG = """\
Output path template:

  The output path for the compiled binaries is specified with the
  "-output" flag. The value is a Python format string. The default value
  is "{Dir}_{OS}_{Arch}". Available variables: Dir, OS, Arch, ImportPath.

Platforms (OS/Arch):

  The operating systems and architectures to cross-compile for may be
  specified with the "-arch" and "-os" flags. These are space separated
  lists of valid GOOS/GOARCH values to build for, respectively. You may
  prefix an OS or Arch with "!" to negate and not build for that platform.
  If the list is made up of only negations, then the negations will come
  from the default list.

  Additionally, the "-osarch" flag may be used to specify complete os/arch
  pairs that should be built or ignored. The syntax for this is what you
  would expect: "darwin/amd64" would be a valid osarch value. Multiple can
  be space separated. An os/arch pair can begin with "!" to not build for
  that platform.

  The "-osarch" flag has the highest precedence when determining whether
  to build for a platform. If it is included in the "-osarch" list, it will
  be built even if the specific os and arch is negated in "-os" and "-arch",
  respectively.

Platform Overrides:

  The "-gcflags", "-ldflags" and "-asmflags" options can be extended
  per-platform by using environment variables. gox will look for
  environment variables in the following format and append their values:

    GOX_[OS]_[ARCH]_GCFLAGS
    GOX_[OS]_[ARCH]_LDFLAGS
    GOX_[OS]_[ARCH]_ASMFLAGS
"""


class CLI:
    """gox command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="gox",
            usage="gox [options] [packages]",
            description=DESCRIPTION,
            epilog=EPILOG,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            allow_abbrev=False,
        )

        parser.add_argument("--version", action="version", version=f"gox {__version__}")
        parser.add_argument(
            "packages",
            nargs="*",
            metavar="PACKAGE",
            help="Packages to build (default: current directory)",
        )

        self._add_platform_options(parser)
        self._add_build_options(parser)
        self._add_global_options(parser)

        return parser

    def _add_platform_options(self, parser):
        """Add platform filter options."""
        group = parser.add_argument_group("platforms")
        group.add_argument(
            "-os",
            "--os",
            action="append",
            metavar="LIST",
            help="Space-separated list of operating systems to build for",
        )
        group.add_argument(
            "-arch",
            "--arch",
            action="append",
            metavar="LIST",
            help="Space-separated list of architectures to build for",
        )
        group.add_argument(
            "-osarch",
            "--osarch",
            action="append",
            metavar="LIST",
            help="Space-separated list of os/arch pairs to build for",
        )
        group.add_argument(
            "-osarch-list",
            "--osarch-list",
            dest="osarch_list",
            action="store_true",
            help="List supported os/arch pairs for your Go version",
        )

    def _add_build_options(self, parser):
        """Add options passed through to go build."""
        group = parser.add_argument_group("build")
        group.add_argument("-ldflags", "--ldflags", metavar="FLAGS", help="Linker flags")
        group.add_argument("-gcflags", "--gcflags", metavar="FLAGS", help="Compiler flags")
        group.add_argument("-asmflags", "--asmflags", metavar="FLAGS", help="Assembler flags")
        group.add_argument("-tags", "--tags", metavar="TAGS", help="Build tags")
        group.add_argument(
            "-output",
            "--output",
            metavar="TEMPLATE",
            help='Output path template (default: "{Dir}_{OS}_{Arch}")',
        )
        group.add_argument(
            "-parallel",
            "--parallel",
            type=int,
            metavar="N",
            help="Amount of parallelism, defaults to number of CPUs - 1",
        )
        group.add_argument(
            "-cgo",
            "--cgo",
            action="store_true",
            default=None,
            help="Sets CGO_ENABLED=1, requires proper C toolchain (advanced)",
        )
        group.add_argument(
            "-rebuild",
            "--rebuild",
            action="store_true",
            default=None,
            help="Force rebuilding of packages that were up to date",
        )
        group.add_argument(
            "-gocmd",
            "--gocmd",
            metavar="CMD",
            help='Build command (default: "go")',
        )

    def _add_global_options(self, parser):
        """Add logging and configuration options."""
        parser.add_argument(
            "-verbose", "--verbose", "-v", action="store_true", help="Verbose mode"
        )
        parser.add_argument(
            "-quiet",
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "-config",
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./gox.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Directory go commands run in (default: current directory)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        A value starting with ``-`` is accepted after an option that takes a
        value, as in ``gox -ldflags -s``.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        if args is None:
            args = sys.argv[1:]
        return self.parser.parse_args(self._join_option_values(args))

    def _join_option_values(self, args: List[str]) -> List[str]:
        """
        Rewrite ``["-ldflags", "-s"]`` into ``["-ldflags=-s"]``.

        Arguments after ``--`` are left untouched.
        """
        value_options = {
            option
            for action in self.parser._actions
            if action.option_strings and action.nargs is None
            for option in action.option_strings
        }

        joined = []
        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--":
                joined.extend(args[i:])
                break
            if arg in value_options and i + 1 < len(args) and args[i + 1].startswith("-"):
                joined.append(f"{arg}={args[i + 1]}")
                i += 2
                continue
            joined.append(arg)
            i += 1
        return joined

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        try:
            parsed_args = self.parse_args(args)
        except SystemExit as e:
            # --help and --version exit 0; usage errors exit 1
            return 0 if e.code in (0, None) else 1

        # Configure logging
        self._configure_logging(parsed_args)

        try:
            config = load_config(Path(parsed_args.project_root), parsed_args.config)
            return self._dispatch_command(parsed_args, config)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except GoxError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args, config) -> int:
        """
        Dispatch to the command handler.

        Args:
            args: Parsed arguments
            config: Loaded configuration

        Returns:
            Exit code from command handler
        """
        if args.osarch_list:
            from gox.cli.commands import osarch_list

            return osarch_list.run(args, config)

        from gox.cli.commands import build

        return build.run(args, config)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
