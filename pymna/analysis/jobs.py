"""Background simulation jobs.

A job runs one analysis on an executor thread and exposes what a UI
needs while it runs: the latest progress fraction, a cancel switch and
the eventual result.

    job = submit_simulation(netlist, TranAnalysis(1e-9, 1e-6))
    ...
    job.progress      # 0.0 .. 1.0
    job.cancel()      # partial result, cancelled=True
    result = job.result()
"""

from __future__ import annotations
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable

from ..circuit import Netlist, AnalysisDirective
from .result import SimulationResult
from .runner import run_simulation

logger = logging.getLogger(__name__)

_default_executor: ThreadPoolExecutor | None = None
_default_lock = threading.Lock()


def _executor() -> ThreadPoolExecutor:
    global _default_executor
    with _default_lock:
        if _default_executor is None:
            _default_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pymna")
        return _default_executor


class SimulationJob:
    """Handle to a simulation running on an executor."""

    def __init__(self):
        self.progress = 0.0
        self._cancel = threading.Event()
        self._future: Future | None = None

    def cancel(self):
        """Ask the running analysis to stop at its next step."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> SimulationResult:
        """Block until the simulation finishes; re-raises its exception."""
        return self._future.result(timeout)


def submit_simulation(
    netlist: Netlist,
    analysis: AnalysisDirective | None = None,
    *,
    executor: Executor | None = None,
    on_progress: Callable[[float], None] | None = None,
    **kwargs,
) -> SimulationJob:
    """
    Start run_simulation on an executor.

    Args:
        netlist: Circuit to simulate
        analysis: Directive (see run_simulation for the default)
        executor: Where to run; a shared single-thread pool if None
        on_progress: Also called with every progress update
        **kwargs: Passed through to run_simulation

    Returns:
        SimulationJob
    """
    job = SimulationJob()

    def report(fraction: float):
        job.progress = fraction
        if on_progress is not None:
            on_progress(fraction)

    def run() -> SimulationResult:
        logger.debug("job started: %s", getattr(analysis, "type", "default"))
        return run_simulation(netlist, analysis, progress=report, cancel=job._cancel, **kwargs)

    job._future = (executor or _executor()).submit(run)
    return job
