"""
Host platform detection for gox.

Reports the machine gox runs on using Go naming (GOOS/GOARCH values), and the
number of CPUs available for parallel builds.

Usage:
    from gox.core.platform import detect_host

    host = detect_host()
    print(f"Running on {host.os}/{host.arch} with {host.cpus} CPUs")
"""

import functools
import os
import platform
from dataclasses import dataclass

# Operating systems derived from Solaris misreport core counts inside
# Joyent-style zones, so parallel builds need a small fixed default there.
SOLARIS_LIKE = frozenset({"solaris", "illumos"})


@dataclass(frozen=True)
class HostInfo:
    """
    Information about the build host.

    Attributes:
        os: Operating system as a GOOS value ('linux', 'darwin', 'windows', ...)
        arch: CPU architecture as a GOARCH value ('amd64', 'arm64', '386', ...)
        cpus: Number of CPUs available to this process
    """

    os: str
    arch: str
    cpus: int

    @property
    def is_solaris_like(self) -> bool:
        return self.os in SOLARIS_LIKE

    def __str__(self) -> str:
        return f"{self.os}/{self.arch} ({self.cpus} CPUs)"


@functools.lru_cache(maxsize=1)
def detect_host() -> HostInfo:
    """
    Detect the current host.

    This function is cached - it only runs detection once per process.

    Returns:
        HostInfo for the running machine

    Example:
        >>> detect_host().os
        'linux'
    """
    return HostInfo(os=_detect_os(), arch=_detect_architecture(), cpus=cpu_count())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        GOOS-style OS name; unknown systems are returned lower-cased
    """
    system = platform.system().lower()

    if system == "sunos":
        # illumos distributions report SunOS as well
        if "illumos" in platform.version().lower():
            return "illumos"
        return "solaris"
    elif system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        GOARCH-style architecture: 'amd64', 'arm64', '386', 'arm', ...
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64", "i86pc"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("arm"):
        return "arm"
    elif machine == "ppc64le":
        return "ppc64le"
    elif machine.startswith("riscv64"):
        return "riscv64"
    else:
        return machine


def cpu_count() -> int:
    """Number of CPUs usable by this process, at least 1."""
    if hasattr(os, "sched_getaffinity"):
        try:
            return max(1, len(os.sched_getaffinity(0)))
        except OSError:
            pass
    return os.cpu_count() or 1


def clear_host_cache():
    """
    Clear the host detection cache.

    Useful for testing.
    """
    detect_host.cache_clear()


__all__ = [
    "HostInfo",
    "SOLARIS_LIKE",
    "detect_host",
    "cpu_count",
    "clear_host_cache",
]
