"""
Pytest configuration and shared fixtures for gox tests.
"""

import subprocess

import pytest

from gox.build.options import BuildOptions, ResolvedOptions
from gox.core.platform import clear_host_cache
from gox.platforms.registry import Platform


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_host_detection():
    """Host detection is cached per process; reset it around each test."""
    clear_host_cache()
    yield
    clear_host_cache()


@pytest.fixture
def small_universe():
    """Three-platform universe used by the selection examples."""
    return (
        Platform("linux", "amd64"),
        Platform("linux", "arm"),
        Platform("darwin", "amd64"),
    )


@pytest.fixture
def default_options() -> BuildOptions:
    """Global build options with the default output template."""
    return BuildOptions()


@pytest.fixture
def resolved_options() -> ResolvedOptions:
    """Resolved options with no flags set."""
    return ResolvedOptions(
        ldflags="",
        gcflags="",
        asmflags="",
        output_template="{Dir}_{OS}_{Arch}",
        tags="",
        cgo=False,
        rebuild=False,
    )


def completed(returncode=0, stdout="", stderr=""):
    """Build a CompletedProcess as returned by subprocess.run."""
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def make_completed():
    """Factory for fake subprocess results."""
    return completed
