"""
Go toolchain adapter.

Wraps the ``go`` command: locating it, reading its version, listing the main
packages to build and running ``go build`` for a single platform.
"""

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from gox.build.dispatcher import CompileUnit
from gox.core.exceptions import (
    CompileError,
    InvalidVersionError,
    MissingToolchainError,
    PackageDiscoveryError,
)

logger = logging.getLogger(__name__)

_VERSION_TOKEN = re.compile(r"\bgo(\d+(?:\.\d+)*(?:(?:rc|beta)\d+)?)\b")

LIST_FORMAT = "{{.Name}}|{{.ImportPath}}"


class GoToolchain:
    """
    The Go command used to list and build packages.

    Example:
        >>> go = GoToolchain("go")
        >>> go.find_executable()
        '/usr/local/go/bin/go'
        >>> go.version()
        'go1.21.3'
    """

    def __init__(
        self,
        command: str = "go",
        working_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.command = command
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.environ = dict(os.environ if environ is None else environ)
        self._executable: Optional[str] = None

    def find_executable(self) -> str:
        """
        Locate the Go command on the PATH.

        Raises:
            MissingToolchainError: If the command cannot be found
        """
        if self._executable is None:
            path = shutil.which(self.command, path=self.environ.get("PATH"))
            if path is None:
                raise MissingToolchainError(self.command)
            self._executable = path
            logger.debug(f"Using {self.command} at {path}")
        return self._executable

    def _run(self, args: Sequence[str], env: Optional[Mapping[str, str]] = None):
        cmd = [self.find_executable(), *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=self.working_dir,
            env=dict(env if env is not None else self.environ),
        )

    def version(self) -> str:
        """
        Return the toolchain version, e.g. ``"go1.21.3"``.

        Raises:
            InvalidVersionError: If ``go version`` fails or prints no version
        """
        try:
            result = self._run(["version"])
        except OSError as e:
            raise InvalidVersionError("", f"could not run {self.command} version: {e}") from e

        output = result.stdout.strip()
        if result.returncode != 0:
            raise InvalidVersionError(output, result.stderr.strip() or "go version failed")

        match = _VERSION_TOKEN.search(output)
        if not match:
            raise InvalidVersionError(output, "no version in go version output")
        return f"go{match.group(1)}"

    def main_packages(self, paths: Sequence[str]) -> List[str]:
        """
        Return the import paths of the main packages under ``paths``.

        Raises:
            PackageDiscoveryError: If ``go list`` fails
        """
        try:
            result = self._run(["list", "-f", LIST_FORMAT, *paths])
        except OSError as e:
            raise PackageDiscoveryError(f"Error reading packages: {e}") from e

        if result.returncode != 0:
            raise PackageDiscoveryError(
                f"Error reading packages: {result.stderr.strip() or result.stdout.strip()}"
            )

        packages = []
        for line in result.stdout.splitlines():
            name, _, import_path = line.strip().partition("|")
            if name == "main" and import_path:
                packages.append(import_path)
        logger.debug(f"Found {len(packages)} main package(s)")
        return packages

    def build_env(self, unit: CompileUnit) -> dict:
        """Environment for building ``unit``: the base env plus GOOS/GOARCH/CGO_ENABLED."""
        env = dict(self.environ)
        env["GOOS"] = unit.platform.os
        env["GOARCH"] = unit.platform.arch
        env["CGO_ENABLED"] = "1" if unit.options.cgo else "0"
        return env

    def output_path(self, unit: CompileUnit) -> Path:
        """
        Absolute path of the binary built for ``unit``.

        Windows binaries get an ``.exe`` suffix unless the rendered path
        already has one.
        """
        output = unit.output_path()
        if unit.platform.os == "windows" and not output.endswith(".exe"):
            output += ".exe"
        path = Path(output)
        if not path.is_absolute():
            path = self.working_dir / path
        return path

    def build_args(self, unit: CompileUnit) -> List[str]:
        """Arguments passed to the Go command for ``unit``."""
        options = unit.options
        output = self.output_path(unit)

        args = ["build"]
        if options.rebuild:
            args.append("-a")
        args.extend(["-gcflags", options.gcflags])
        args.extend(["-ldflags", options.ldflags])
        args.extend(["-asmflags", options.asmflags])
        args.extend(["-tags", options.tags])
        args.extend(["-o", str(output), unit.package])
        return args

    def compile(self, unit: CompileUnit) -> None:
        """
        Build one package for one platform.

        Raises:
            CompileError: If ``go build`` exits non-zero or cannot be started
        """
        try:
            result = self._run(self.build_args(unit), env=self.build_env(unit))
        except OSError as e:
            raise CompileError(f"could not run {self.command}: {e}") from e

        if result.returncode != 0:
            raise CompileError(
                f"{self.command} build exited with status {result.returncode}",
                stderr=result.stderr,
            )


__all__ = ["GoToolchain", "LIST_FORMAT"]
