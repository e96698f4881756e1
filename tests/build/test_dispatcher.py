"""
Tests for parallel dispatch and failure aggregation.

Tests cover:
- Parallelism defaults
- Cross product planning with per-platform overrides
- Concurrency cap
- Partial failure semantics
- Cancellation
"""

import threading
import time
from unittest.mock import patch

import pytest

from gox.build.dispatcher import (
    SOLARIS_PARALLELISM,
    BuildReport,
    Dispatcher,
    ErrorLog,
    ErrorRecord,
    resolve_parallelism,
)
from gox.build.options import BuildOptions
from gox.core.exceptions import CompileError, EmptyPlatformSetError
from gox.core.platform import HostInfo
from gox.platforms.registry import Platform

PLATFORMS = [
    Platform("linux", "amd64"),
    Platform("linux", "arm"),
    Platform("darwin", "amd64"),
    Platform("windows", "386"),
]


class ConcurrencyProbe:
    """compile_fn that records how many calls overlap."""

    def __init__(self, delay=0.02, fail_on=()):
        self.delay = delay
        self.fail_on = set(fail_on)
        self.lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = []

    def __call__(self, unit):
        with self.lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.calls.append(unit)
        try:
            time.sleep(self.delay)
            if str(unit.platform) in self.fail_on:
                raise CompileError("exit status 2", stderr="undefined: foo")
        finally:
            with self.lock:
                self.in_flight -= 1


class TestResolveParallelism:
    def test_explicit_value_wins(self):
        assert resolve_parallelism(5, cpus=64, host_os="solaris") == 5

    def test_cpus_minus_one(self):
        assert resolve_parallelism(0, cpus=8, host_os="linux") == 7

    def test_negative_means_auto(self):
        assert resolve_parallelism(-1, cpus=4, host_os="darwin") == 3

    def test_single_cpu(self):
        assert resolve_parallelism(0, cpus=1, host_os="linux") == 1

    @pytest.mark.parametrize("host_os", ["solaris", "illumos"])
    def test_solaris_like_hosts(self, host_os):
        assert resolve_parallelism(0, cpus=48, host_os=host_os) == SOLARIS_PARALLELISM

    def test_detects_host(self):
        with patch(
            "gox.build.dispatcher.detect_host",
            return_value=HostInfo(os="linux", arch="amd64", cpus=16),
        ):
            assert resolve_parallelism(0) == 15


class TestErrorLog:
    def test_append_and_records(self):
        log = ErrorLog()
        record = ErrorRecord(Platform("linux", "arm"), "app", "boom")
        log.append(record)
        assert log.records() == (record,)
        assert len(log) == 1

    def test_concurrent_appends(self):
        log = ErrorLog()

        def worker(n):
            for i in range(100):
                log.append(ErrorRecord(Platform("linux", "amd64"), f"p{n}", str(i)))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 800

    def test_record_str(self):
        record = ErrorRecord(Platform("windows", "386"), "app", "exit status 1")
        assert str(record) == "windows/386 error: exit status 1"


class TestBuildReport:
    def test_success(self):
        assert BuildReport(total=2, compiled=2).success

    def test_failure(self):
        record = ErrorRecord(Platform("linux", "arm"), "app", "boom")
        report = BuildReport(total=2, compiled=1, failures=(record,))
        assert not report.success

    def test_cancelled_is_not_success(self):
        report = BuildReport(total=3, compiled=1, skipped=2)
        assert report.cancelled
        assert not report.success

    def test_interrupted_without_skips(self):
        report = BuildReport(total=2, compiled=2, interrupted=True)
        assert report.cancelled
        assert not report.success


class TestDispatcherPlan:
    def test_cross_product_platform_major(self):
        dispatcher = Dispatcher(lambda unit: None, parallelism=1)
        units = dispatcher.plan(["a", "b"], PLATFORMS[:2], BuildOptions(), environ={})
        assert [(u.platform.arch, u.package) for u in units] == [
            ("amd64", "a"),
            ("amd64", "b"),
            ("arm", "a"),
            ("arm", "b"),
        ]

    def test_overrides_applied_per_platform(self):
        dispatcher = Dispatcher(lambda unit: None, parallelism=1)
        env = {"GOX_LINUX_ARM_LDFLAGS": "-X arm=1"}
        units = dispatcher.plan(["app"], PLATFORMS[:2], BuildOptions(ldflags="-s"), environ=env)
        assert units[0].options.ldflags == "-s"
        assert units[1].options.ldflags == "-s -X arm=1"

    def test_unit_output_path(self):
        dispatcher = Dispatcher(lambda unit: None, parallelism=1)
        units = dispatcher.plan(["example.com/app"], [Platform("windows", "386")], BuildOptions())
        assert units[0].output_path() == "app_windows_386"

    def test_invalid_parallelism(self):
        with pytest.raises(ValueError):
            Dispatcher(lambda unit: None, parallelism=0)


class TestDispatcherRun:
    def test_all_units_compiled(self):
        probe = ConcurrencyProbe(delay=0)
        report = Dispatcher(probe, parallelism=2).run(["a", "b"], PLATFORMS, BuildOptions())

        assert report.success
        assert report.total == 8
        assert report.compiled == 8
        assert len(probe.calls) == 8
        assert {(u.package, u.platform) for u in probe.calls} == {
            (pkg, p) for pkg in ("a", "b") for p in PLATFORMS
        }

    @pytest.mark.parametrize("parallelism", [1, 2, 3])
    def test_concurrency_cap(self, parallelism):
        probe = ConcurrencyProbe(delay=0.02)
        Dispatcher(probe, parallelism=parallelism).run(
            ["a", "b", "c"], PLATFORMS, BuildOptions()
        )
        assert len(probe.calls) == 12
        assert probe.max_in_flight <= parallelism

    def test_cap_is_reached(self):
        probe = ConcurrencyProbe(delay=0.05)
        Dispatcher(probe, parallelism=4).run(["a", "b"], PLATFORMS, BuildOptions())
        assert probe.max_in_flight > 1

    def test_partial_failure(self):
        probe = ConcurrencyProbe(delay=0, fail_on={"linux/arm"})
        report = Dispatcher(probe, parallelism=2).run(["app"], PLATFORMS, BuildOptions())

        assert not report.success
        assert len(probe.calls) == len(PLATFORMS)
        assert report.compiled == len(PLATFORMS) - 1
        assert len(report.failures) == 1
        failure = report.failures[0]
        assert failure.platform == Platform("linux", "arm")
        assert failure.package == "app"
        assert "undefined: foo" in failure.message

    def test_every_failure_recorded(self):
        probe = ConcurrencyProbe(delay=0, fail_on={str(p) for p in PLATFORMS})
        report = Dispatcher(probe, parallelism=3).run(["app"], PLATFORMS, BuildOptions())
        assert len(report.failures) == len(PLATFORMS)
        assert report.compiled == 0

    def test_unexpected_exception_is_recorded(self):
        def compile_fn(unit):
            raise RuntimeError("unexpected")

        report = Dispatcher(compile_fn, parallelism=1).run(["app"], PLATFORMS[:1], BuildOptions())
        assert report.failures[0].message == "unexpected"

    def test_no_retries(self):
        probe = ConcurrencyProbe(delay=0, fail_on={"darwin/amd64"})
        Dispatcher(probe, parallelism=1).run(["app"], PLATFORMS, BuildOptions())
        darwin_calls = [u for u in probe.calls if u.platform == Platform("darwin", "amd64")]
        assert len(darwin_calls) == 1

    def test_empty_platforms(self):
        with pytest.raises(EmptyPlatformSetError):
            Dispatcher(lambda unit: None, parallelism=1).run(["app"], [], BuildOptions())


class TestCancellation:
    def test_pre_cancelled_run_skips_everything(self):
        probe = ConcurrencyProbe(delay=0)
        event = threading.Event()
        event.set()
        report = Dispatcher(probe, parallelism=2, cancel_event=event).run(
            ["app"], PLATFORMS, BuildOptions()
        )
        assert probe.calls == []
        assert report.skipped == len(PLATFORMS)
        assert report.cancelled

    def test_cancel_mid_run_lets_in_flight_finish(self):
        event = threading.Event()
        finished = []

        def compile_fn(unit):
            # The first unit cancels the run while it is still in flight
            event.set()
            time.sleep(0.02)
            finished.append(unit)

        dispatcher = Dispatcher(compile_fn, parallelism=1, cancel_event=event)
        report = dispatcher.run(["app"], PLATFORMS, BuildOptions())

        assert len(finished) == 1
        assert report.compiled == 1
        assert report.skipped == len(PLATFORMS) - 1
        assert not report.success

    def test_interrupt_after_all_units_started(self):
        """A run interrupted with nothing left to skip is still cancelled."""
        event = threading.Event()

        def compile_fn(unit):
            event.set()

        dispatcher = Dispatcher(compile_fn, parallelism=1, cancel_event=event)
        report = dispatcher.run(["app"], PLATFORMS[:1], BuildOptions())

        assert report.compiled == 1
        assert report.skipped == 0
        assert report.interrupted
        assert report.cancelled
        assert not report.success

    def test_uninterrupted_run(self):
        report = Dispatcher(lambda unit: None, parallelism=2).run(
            ["app"], PLATFORMS, BuildOptions()
        )
        assert not report.interrupted
        assert not report.cancelled
