"""
Unit tests for the platform registry.
"""

import pytest
from packaging.version import Version

from gox.core.exceptions import InvalidVersionError
from gox.platforms.registry import (
    Platform,
    denied_platforms,
    listed_platforms,
    parse_version,
    supported_platforms,
)


class TestPlatform:
    """Tests for the Platform value type."""

    def test_string_form(self):
        assert str(Platform("linux", "amd64")) == "linux/amd64"

    def test_equality_and_hash(self):
        a = Platform("linux", "arm")
        b = Platform("linux", "arm")
        assert a == b
        assert len({a, b}) == 1
        assert Platform("linux", "arm") != Platform("linux", "arm64")

    def test_parse(self):
        assert Platform.parse("darwin/arm64") == Platform("darwin", "arm64")

    @pytest.mark.parametrize("value", ["linux", "linux/", "/amd64", "a/b/c", ""])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            Platform.parse(value)

    def test_immutable(self):
        platform = Platform("linux", "amd64")
        with pytest.raises(Exception):
            platform.os = "darwin"


class TestParseVersion:
    """Tests for toolchain version parsing."""

    def test_go_prefix(self):
        assert parse_version("go1.21.3") == Version("1.21.3")

    def test_bare_version(self):
        assert parse_version("1.20") == Version("1.20")

    def test_release_candidate(self):
        assert parse_version("go1.22rc1") == Version("1.22rc1")

    def test_surrounding_whitespace(self):
        assert parse_version("  go1.18\n") == Version("1.18")

    @pytest.mark.parametrize("value", ["", "go", "devel", "gotip", "go1.x"])
    def test_invalid(self, value):
        with pytest.raises(InvalidVersionError):
            parse_version(value)


class TestSupportedPlatforms:
    """Tests for supported_platforms()."""

    def test_go_1_0(self):
        platforms = supported_platforms("go1.0")
        assert [str(p) for p in platforms] == [
            "darwin/386",
            "darwin/amd64",
            "linux/386",
            "linux/amd64",
            "linux/arm",
            "freebsd/386",
            "freebsd/amd64",
            "openbsd/386",
            "openbsd/amd64",
            "windows/386",
            "windows/amd64",
        ]

    def test_no_duplicates(self):
        platforms = supported_platforms("go1.21")
        assert len(platforms) == len(set(platforms))

    def test_platforms_added_later(self):
        assert Platform("linux", "arm64") not in supported_platforms("go1.4")
        assert Platform("linux", "arm64") in supported_platforms("go1.5")
        assert Platform("wasip1", "wasm") in supported_platforms("go1.21.0")

    def test_removed_platforms(self):
        assert Platform("darwin", "386") in supported_platforms("go1.14")
        assert Platform("darwin", "386") not in supported_platforms("go1.15")
        assert Platform("nacl", "386") not in supported_platforms("go1.14")

    def test_denylist_always_applies(self):
        platforms = supported_platforms("go1.21")
        assert Platform("android", "arm64") not in platforms
        assert Platform("ios", "arm64") not in platforms

    def test_denylist_fixed_version(self):
        assert Platform("darwin", "arm64") not in supported_platforms("go1.15")
        assert Platform("darwin", "arm64") in supported_platforms("go1.16")

    def test_release_candidate_counts_as_release(self):
        assert Platform("wasip1", "wasm") in supported_platforms("go1.21rc2")

    def test_deterministic(self):
        assert supported_platforms("go1.20") == supported_platforms("go1.20")

    def test_invalid_version(self):
        with pytest.raises(InvalidVersionError):
            supported_platforms("not-a-version")


class TestListedAndDenied:
    """Tests for listed_platforms() and denied_platforms()."""

    def test_listed_includes_denied(self):
        listed = listed_platforms("go1.21")
        assert Platform("android", "arm64") in listed
        assert Platform("linux", "amd64") in listed

    def test_denied_reasons(self):
        entries = denied_platforms("go1.21")
        assert all(entry.reason for entry in entries)
        assert Platform("darwin", "arm64") not in {e.platform for e in entries}

    def test_denied_before_fix(self):
        entries = denied_platforms("go1.10")
        assert Platform("darwin", "arm64") in {e.platform for e in entries}

    def test_supported_is_listed_minus_denied(self):
        version = "go1.12"
        denied = {e.platform for e in denied_platforms(version)}
        expected = [p for p in listed_platforms(version) if p not in denied]
        assert list(supported_platforms(version)) == expected
