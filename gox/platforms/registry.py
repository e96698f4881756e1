"""
Registry of GOOS/GOARCH platforms known to each Go toolchain version.

The table records when each platform appeared in (and, for retired ports,
disappeared from) the Go distribution. A separate denylist removes platforms
that the distribution lists but that cannot produce a working binary with a
plain ``go build``. Denylist entries may carry the version that fixed the
problem, at which point the platform is offered again.

Example:
    >>> from gox.platforms.registry import supported_platforms
    >>> [str(p) for p in supported_platforms("go1.0")][:3]
    ['darwin/386', 'darwin/amd64', 'linux/386']
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from packaging.version import InvalidVersion, Version

from gox.core.exceptions import InvalidVersionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Platform:
    """
    A GOOS/GOARCH pair to build for.

    Two platforms are equal when both OS and Arch match.
    """

    os: str
    arch: str

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Parse an ``"os/arch"`` string. Raises ValueError if malformed."""
        parts = value.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"expected 'os/arch', got {value!r}")
        return cls(parts[0], parts[1])

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@dataclass(frozen=True)
class PlatformEntry:
    """One row of the platform table."""

    platform: Platform
    added: Version
    removed: Optional[Version] = None

    def available_in(self, version: Version) -> bool:
        if version < self.added:
            return False
        return self.removed is None or version < self.removed


@dataclass(frozen=True)
class DenyEntry:
    """A listed but non-functional platform, optionally fixed in a later release."""

    platform: Platform
    reason: str
    fixed_in: Optional[Version] = None

    def applies_to(self, version: Version) -> bool:
        return self.fixed_in is None or version < self.fixed_in


def _entry(os_name, arch, added, removed=None) -> PlatformEntry:
    return PlatformEntry(
        platform=Platform(os_name, arch),
        added=Version(added),
        removed=Version(removed) if removed else None,
    )


_PLATFORM_TABLE: Tuple[PlatformEntry, ...] = (
    # Go 1.0
    _entry("darwin", "386", "1.0", removed="1.15"),
    _entry("darwin", "amd64", "1.0"),
    _entry("linux", "386", "1.0"),
    _entry("linux", "amd64", "1.0"),
    _entry("linux", "arm", "1.0"),
    _entry("freebsd", "386", "1.0"),
    _entry("freebsd", "amd64", "1.0"),
    _entry("openbsd", "386", "1.0"),
    _entry("openbsd", "amd64", "1.0"),
    _entry("windows", "386", "1.0"),
    _entry("windows", "amd64", "1.0"),
    # Go 1.1
    _entry("freebsd", "arm", "1.1"),
    _entry("netbsd", "386", "1.1"),
    _entry("netbsd", "amd64", "1.1"),
    _entry("netbsd", "arm", "1.1"),
    _entry("plan9", "386", "1.1"),
    # Go 1.3
    _entry("dragonfly", "386", "1.3", removed="1.5"),
    _entry("dragonfly", "amd64", "1.3"),
    _entry("nacl", "386", "1.3", removed="1.14"),
    _entry("nacl", "amd64p32", "1.3", removed="1.14"),
    _entry("nacl", "arm", "1.3", removed="1.14"),
    _entry("solaris", "amd64", "1.3"),
    # Go 1.4
    _entry("android", "arm", "1.4"),
    _entry("plan9", "amd64", "1.4"),
    # Go 1.5
    _entry("darwin", "arm", "1.5", removed="1.15"),
    _entry("darwin", "arm64", "1.5"),
    _entry("linux", "arm64", "1.5"),
    _entry("linux", "ppc64", "1.5"),
    _entry("linux", "ppc64le", "1.5"),
    # Go 1.6
    _entry("android", "386", "1.6"),
    _entry("linux", "mips64", "1.6"),
    _entry("linux", "mips64le", "1.6"),
    # Go 1.7
    _entry("android", "amd64", "1.7"),
    _entry("android", "arm64", "1.7"),
    _entry("linux", "s390x", "1.7"),
    _entry("plan9", "arm", "1.7"),
    # Go 1.8
    _entry("linux", "mips", "1.8"),
    _entry("linux", "mipsle", "1.8"),
    # Go 1.11
    _entry("js", "wasm", "1.11"),
    # Go 1.12
    _entry("aix", "ppc64", "1.12"),
    _entry("windows", "arm", "1.12"),
    # Go 1.13
    _entry("illumos", "amd64", "1.13"),
    _entry("netbsd", "arm64", "1.13"),
    _entry("openbsd", "arm", "1.13"),
    _entry("openbsd", "arm64", "1.13"),
    # Go 1.14
    _entry("freebsd", "arm64", "1.14"),
    _entry("linux", "riscv64", "1.14"),
    # Go 1.16
    _entry("ios", "amd64", "1.16"),
    _entry("ios", "arm64", "1.16"),
    _entry("openbsd", "mips64", "1.16"),
    # Go 1.17
    _entry("windows", "arm64", "1.17"),
    # Go 1.19
    _entry("linux", "loong64", "1.19"),
    # Go 1.20
    _entry("freebsd", "riscv64", "1.20"),
    # Go 1.21
    _entry("wasip1", "wasm", "1.21"),
    # Go 1.22
    _entry("openbsd", "ppc64", "1.22"),
    # Go 1.23
    _entry("openbsd", "riscv64", "1.23"),
)

_NEEDS_SDK = "requires cgo and an external mobile SDK"

_DENYLIST: Tuple[DenyEntry, ...] = (
    DenyEntry(Platform("android", "386"), _NEEDS_SDK),
    DenyEntry(Platform("android", "amd64"), _NEEDS_SDK),
    DenyEntry(Platform("android", "arm"), _NEEDS_SDK),
    DenyEntry(Platform("android", "arm64"), _NEEDS_SDK),
    DenyEntry(Platform("darwin", "arm"), _NEEDS_SDK),
    # darwin/arm64 meant iOS devices until Go 1.16 added Apple silicon Macs
    DenyEntry(Platform("darwin", "arm64"), _NEEDS_SDK, fixed_in=Version("1.16")),
    DenyEntry(Platform("ios", "amd64"), _NEEDS_SDK),
    DenyEntry(Platform("ios", "arm64"), _NEEDS_SDK),
)


def parse_version(version: Union[str, Version]) -> Version:
    """
    Parse a Go toolchain version.

    Accepts ``runtime.Version()`` style strings such as ``"go1.21.3"`` or
    ``"go1.22rc1"`` as well as bare ``"1.21"``.

    Raises:
        InvalidVersionError: If the string is not a release version
    """
    if isinstance(version, Version):
        return version

    text = version.strip()
    if text.startswith("go"):
        text = text[2:]
    if not text:
        raise InvalidVersionError(version, "empty version")

    try:
        return Version(text)
    except InvalidVersion as e:
        raise InvalidVersionError(version, str(e)) from e


def _release(version: Union[str, Version]) -> Version:
    # pre-releases such as go1.22rc1 already ship the 1.22 ports
    return Version(parse_version(version).base_version)


def denied_platforms(version: Union[str, Version]) -> Tuple[DenyEntry, ...]:
    """Return the denylist entries in force for ``version``."""
    parsed = _release(version)
    return tuple(entry for entry in _DENYLIST if entry.applies_to(parsed))


def listed_platforms(version: Union[str, Version]) -> Tuple[Platform, ...]:
    """Return every platform the Go distribution lists for ``version``, denied or not."""
    parsed = _release(version)
    return tuple(e.platform for e in _PLATFORM_TABLE if e.available_in(parsed))


def supported_platforms(version: Union[str, Version]) -> Tuple[Platform, ...]:
    """
    Return the platforms a toolchain version can build for.

    Args:
        version: Toolchain version, e.g. ``"go1.21.3"``

    Returns:
        Tuple of platforms in table order, without duplicates

    Raises:
        InvalidVersionError: If ``version`` cannot be parsed
    """
    parsed = _release(version)
    denied = {entry.platform for entry in denied_platforms(parsed)}

    result = []
    seen = set()
    for platform in listed_platforms(parsed):
        if platform in denied or platform in seen:
            continue
        seen.add(platform)
        result.append(platform)

    logger.debug(f"Go {parsed}: {len(result)} supported platforms")
    return tuple(result)


__all__ = [
    "Platform",
    "PlatformEntry",
    "DenyEntry",
    "parse_version",
    "listed_platforms",
    "denied_platforms",
    "supported_platforms",
]
