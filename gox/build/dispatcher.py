"""
Parallel dispatch of compile units and aggregation of their failures.

Every (package, platform) pair becomes a ``CompileUnit``. Units run on a
fixed-size thread pool, so no more than ``parallelism`` compiles are in
flight at once. A failing unit is recorded in a shared ``ErrorLog`` and never
stops its siblings; the outcome is only decided after every unit finished.

Example:
    >>> dispatcher = Dispatcher(toolchain.compile, parallelism=4)
    >>> report = dispatcher.run(["example.com/app"], platforms, BuildOptions())
    >>> if not report.success:
    ...     for failure in report.failures:
    ...         print(failure)
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from gox.build.options import BuildOptions, ResolvedOptions, render_output_path
from gox.build.overrides import resolve_options
from gox.core.exceptions import EmptyPlatformSetError
from gox.core.platform import SOLARIS_LIKE, detect_host
from gox.platforms.registry import Platform

logger = logging.getLogger(__name__)

# Default parallelism on Solaris-derived hosts, whose zones report the core
# count of the whole machine.
SOLARIS_PARALLELISM = 3


@dataclass(frozen=True)
class CompileUnit:
    """One package built for one platform."""

    package: str
    platform: Platform
    options: ResolvedOptions

    def output_path(self) -> str:
        return render_output_path(self.options.output_template, self.package, self.platform)


@dataclass(frozen=True)
class ErrorRecord:
    """A failed compile."""

    platform: Platform
    package: str
    message: str

    def __str__(self) -> str:
        return f"{self.platform} error: {self.message}"


class ErrorLog:
    """Append-only failure collection shared by concurrent units."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[ErrorRecord] = []

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)

    def records(self) -> Tuple[ErrorRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


@dataclass(frozen=True)
class BuildReport:
    """
    Outcome of a dispatch run.

    Attributes:
        total: Number of units planned
        compiled: Units that compiled successfully
        failures: Units that failed, in completion order
        skipped: Units never started because the run was cancelled
        interrupted: The cancel event was set during the run, even if every
                     unit had already started
    """

    total: int
    compiled: int
    failures: Tuple[ErrorRecord, ...] = ()
    skipped: int = 0
    interrupted: bool = False

    @property
    def cancelled(self) -> bool:
        return self.interrupted or self.skipped > 0

    @property
    def success(self) -> bool:
        return not self.failures and not self.cancelled


def resolve_parallelism(
    requested: int, cpus: Optional[int] = None, host_os: Optional[str] = None
) -> int:
    """
    Decide how many compiles may run at once.

    Args:
        requested: Value asked for; <= 0 means pick a default
        cpus: Available CPUs (detected when None)
        host_os: Host GOOS value (detected when None)

    Returns:
        ``requested`` if positive, otherwise CPUs - 1 (at least 1), or
        ``SOLARIS_PARALLELISM`` on Solaris-like hosts

    Example:
        >>> resolve_parallelism(0, cpus=8, host_os="linux")
        7
    """
    if requested > 0:
        return requested

    if cpus is None or host_os is None:
        host = detect_host()
        cpus = host.cpus if cpus is None else cpus
        host_os = host.os if host_os is None else host_os

    if host_os in SOLARIS_LIKE:
        return SOLARIS_PARALLELISM
    return max(1, cpus - 1)


CompileFn = Callable[[CompileUnit], None]


class Dispatcher:
    """
    Run compile units with bounded parallelism.

    ``compile_fn`` is called once per unit and signals failure by raising.
    """

    def __init__(
        self,
        compile_fn: CompileFn,
        parallelism: int,
        cancel_event: Optional[threading.Event] = None,
    ):
        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {parallelism}")
        self.compile_fn = compile_fn
        self.parallelism = parallelism
        self.cancel_event = cancel_event or threading.Event()

    def plan(
        self,
        packages: Sequence[str],
        platforms: Sequence[Platform],
        template: BuildOptions,
        environ: Optional[Mapping[str, str]] = None,
    ) -> List[CompileUnit]:
        """Build the packages x platforms cross product, platform-major."""
        units = []
        for platform in platforms:
            options = resolve_options(template, platform, environ)
            for package in packages:
                units.append(CompileUnit(package=package, platform=platform, options=options))
        return units

    def run(
        self,
        packages: Sequence[str],
        platforms: Sequence[Platform],
        template: BuildOptions,
        environ: Optional[Mapping[str, str]] = None,
    ) -> BuildReport:
        """
        Plan and run every unit, then report.

        Raises:
            EmptyPlatformSetError: If there is no platform to build for
        """
        if not platforms:
            raise EmptyPlatformSetError()
        return self.run_units(self.plan(packages, platforms, template, environ))

    def run_units(self, units: Sequence[CompileUnit]) -> BuildReport:
        """
        Run ``units`` and wait for all of them.

        On KeyboardInterrupt, units that have not started are skipped and
        the in-flight ones are allowed to finish.
        """
        state = _RunState()
        executor = ThreadPoolExecutor(max_workers=self.parallelism, thread_name_prefix="gox")
        try:
            futures = [executor.submit(self._execute, unit, state) for unit in units]
            wait(futures)
        except KeyboardInterrupt:
            logger.info("Interrupted, waiting for running builds to finish")
            self.cancel()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        return BuildReport(
            total=len(units),
            compiled=state.compiled,
            failures=state.errors.records(),
            skipped=len(units) - state.started,
            interrupted=self.cancel_event.is_set(),
        )

    def cancel(self) -> None:
        """Skip units that have not started yet."""
        self.cancel_event.set()

    def _execute(self, unit: CompileUnit, state: "_RunState") -> None:
        if self.cancel_event.is_set():
            logger.debug(f"Skipping {unit.platform}: {unit.package}")
            return
        state.mark_started()

        logger.info(f"--> {str(unit.platform):>15}: {unit.package}")
        try:
            self.compile_fn(unit)
        except Exception as e:
            logger.debug(f"{unit.platform} failed: {e}")
            state.errors.append(
                ErrorRecord(platform=unit.platform, package=unit.package, message=str(e))
            )
        else:
            state.mark_compiled()


class _RunState:
    """Counters and failures of one run_units() call."""

    def __init__(self):
        self.errors = ErrorLog()
        self._lock = threading.Lock()
        self.started = 0
        self.compiled = 0

    def mark_started(self) -> None:
        with self._lock:
            self.started += 1

    def mark_compiled(self) -> None:
        with self._lock:
            self.compiled += 1


__all__ = [
    "SOLARIS_PARALLELISM",
    "CompileUnit",
    "ErrorRecord",
    "ErrorLog",
    "BuildReport",
    "resolve_parallelism",
    "Dispatcher",
]
