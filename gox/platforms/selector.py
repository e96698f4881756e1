"""
Platform selection from OS, Arch and OS/Arch filters.

Each filter is a list of tokens; a leading ``!`` negates a token. The OS and
Arch filters are applied independently: a filter containing any positive
token allows exactly those values, a filter made only of negations allows
every value in the universe except the negated ones. OS/Arch pair tokens are
applied last and take precedence: a positive pair adds the platform back, a
negated pair removes it no matter what else selected it.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Set, Tuple

from gox.core.exceptions import InvalidFilterTokenError
from gox.platforms.registry import Platform

logger = logging.getLogger(__name__)

NEGATION = "!"


@dataclass(frozen=True)
class FilterToken:
    """A single filter value, possibly negated."""

    value: str
    negated: bool = False

    def __str__(self) -> str:
        return f"{NEGATION}{self.value}" if self.negated else self.value


@dataclass(frozen=True)
class PlatformSpec:
    """Ordered filter tokens over one dimension (OS, Arch or OS/Arch)."""

    tokens: Tuple[FilterToken, ...] = ()

    @property
    def positive(self) -> List[str]:
        return [t.value for t in self.tokens if not t.negated]

    @property
    def negative(self) -> List[str]:
        return [t.value for t in self.tokens if t.negated]

    def allowed(self, universe_values: Iterable[str]) -> Set[str]:
        """
        Resolve this spec to the set of allowed values.

        A spec with any positive token allows exactly the positive tokens;
        otherwise every universe value minus the negated tokens is allowed.
        """
        positive = self.positive
        if positive:
            return set(positive)
        return set(universe_values) - set(self.negative)

    def __bool__(self) -> bool:
        return bool(self.tokens)


@dataclass(frozen=True)
class SelectionResult:
    """Platforms selected for a build, plus any non-fatal warnings."""

    platforms: Tuple[Platform, ...]
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not self.platforms


def _split(values) -> List[str]:
    """Split raw flag values on whitespace; accepts a string or a list of strings."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    words = []
    for value in values:
        words.extend(value.split())
    return words


def _parse_token(word: str) -> FilterToken:
    negated = word.startswith(NEGATION)
    value = word[len(NEGATION) :] if negated else word
    if not value or value.startswith(NEGATION):
        raise InvalidFilterTokenError(word, "missing value")
    return FilterToken(value=value, negated=negated)


def parse_spec(values) -> PlatformSpec:
    """
    Parse OS or Arch filter values.

    Args:
        values: A whitespace-separated string, or a list of such strings
                (one per flag occurrence)

    Returns:
        PlatformSpec with tokens in input order

    Raises:
        InvalidFilterTokenError: If a token is empty after its negation
                                 or names a pair where a single value is expected

    Example:
        >>> spec = parse_spec("linux !arm")
        >>> spec.positive, spec.negative
        (['linux'], ['arm'])
    """
    tokens = []
    for word in _split(values):
        token = _parse_token(word)
        if "/" in token.value:
            raise InvalidFilterTokenError(word, "use -osarch for os/arch pairs")
        tokens.append(token)
    return PlatformSpec(tuple(tokens))


def parse_osarch_spec(values) -> PlatformSpec:
    """
    Parse OS/Arch pair filter values such as ``"linux/amd64 !darwin/386"``.

    Raises:
        InvalidFilterTokenError: If a token is not of the form ``os/arch``
    """
    tokens = []
    for word in _split(values):
        token = _parse_token(word)
        try:
            Platform.parse(token.value)
        except ValueError as e:
            raise InvalidFilterTokenError(word, str(e)) from e
        tokens.append(token)
    return PlatformSpec(tuple(tokens))


def _canonical_ranks(universe: Sequence[Platform]):
    os_rank = {}
    arch_rank = {}
    for platform in universe:
        os_rank.setdefault(platform.os, len(os_rank))
        arch_rank.setdefault(platform.arch, len(arch_rank))
    return os_rank, arch_rank


def select_platforms(
    os_spec: PlatformSpec,
    arch_spec: PlatformSpec,
    osarch_spec: PlatformSpec,
    universe: Sequence[Platform],
) -> SelectionResult:
    """
    Select the platforms to build.

    Args:
        os_spec: OS filter
        arch_spec: Arch filter
        osarch_spec: OS/Arch pair filter (highest precedence)
        universe: Every platform the toolchain supports, in canonical order

    Returns:
        SelectionResult ordered by OS, then Arch, following the order in
        which values first appear in ``universe``

    Example:
        >>> universe = [Platform("linux", "amd64"), Platform("linux", "arm"),
        ...             Platform("darwin", "amd64")]
        >>> result = select_platforms(parse_spec("linux"), parse_spec(""),
        ...                           parse_osarch_spec("darwin/amd64"), universe)
        >>> [str(p) for p in result.platforms]
        ['linux/amd64', 'linux/arm', 'darwin/amd64']
    """
    by_key = {}
    for platform in universe:
        by_key.setdefault(str(platform), platform)

    allowed_os = os_spec.allowed(p.os for p in by_key.values())
    allowed_arch = arch_spec.allowed(p.arch for p in by_key.values())

    selected = {
        key
        for key, platform in by_key.items()
        if platform.os in allowed_os and platform.arch in allowed_arch
    }

    warnings = []
    for value in osarch_spec.positive:
        if value in by_key:
            selected.add(value)
        else:
            msg = f"Platform {value} is not supported by this toolchain, ignoring"
            logger.debug(msg)
            warnings.append(msg)

    for value in osarch_spec.negative:
        selected.discard(value)

    os_rank, arch_rank = _canonical_ranks(list(by_key.values()))
    platforms = sorted(
        (by_key[key] for key in selected),
        key=lambda p: (os_rank[p.os], arch_rank[p.arch]),
    )

    logger.debug(f"Selected {len(platforms)} of {len(by_key)} platforms")
    return SelectionResult(platforms=tuple(platforms), warnings=tuple(warnings))


__all__ = [
    "FilterToken",
    "PlatformSpec",
    "SelectionResult",
    "parse_spec",
    "parse_osarch_spec",
    "select_platforms",
]
