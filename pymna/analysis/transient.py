"""Transient analysis (Backward Euler, fixed step)."""

from __future__ import annotations
import logging
import time
from functools import partial
from typing import Callable

import jax.numpy as jnp

from ..circuit import Netlist, TranAnalysis
from ..engine import (
    Companion,
    SolverOptions,
    TRANSIENT_OPTIONS,
    assemble,
    create_mna,
    newton_raphson,
)
from .. import config
from .grid import count_intervals
from .op import solve_operating_point
from .result import RunLog, SignalRecorder, SimulationResult, Waveform, is_cancelled

logger = logging.getLogger(__name__)


def initial_conditions(netlist: Netlist) -> dict[str, float]:
    """Capacitor voltages and inductor currents given by device ic values."""
    return {
        dev.name: dev.ic
        for dev in netlist.devices
        if dev.kind in ("capacitor", "inductor") and dev.ic is not None
    }


def run_transient(
    netlist: Netlist,
    analysis: TranAnalysis,
    *,
    progress: Callable[[float], None] | None = None,
    cancel=None,
    options: SolverOptions = TRANSIENT_OPTIONS,
    op_options: SolverOptions = SolverOptions(),
) -> SimulationResult:
    """
    Step the circuit from analysis.start to analysis.stop.

    The DC operating point gives the initial state (skipped with uic,
    where device ic values seed the first step instead). At every time
    point t = start + k*h the Newton solve stamps sources at t and
    capacitor/inductor companions built from the previous accepted time
    point's solution, starting from that same solution.

    Output is downsampled to about config.MAX_WAVEFORM_POINTS samples
    (stride max(1, total_steps // MAX_WAVEFORM_POINTS)); the initial and
    final points are always kept.

    Args:
        netlist: Circuit to simulate
        analysis: Transient directive
        progress: Called with the completed fraction every
            config.PROGRESS_EVERY_STEPS steps
        cancel: Object with is_set(); checked before each step
        options: Newton settings per time step
        op_options: Newton settings for the initial operating point

    Returns:
        SimulationResult with V(node)/I(branch) versus time. converged
        is False if the operating point or any step failed to converge.
    """
    analysis.validate()
    t0 = time.perf_counter()
    log = RunLog(logger)

    h = analysis.step
    if analysis.max_step is not None:
        h = min(h, analysis.max_step)
    t_start, t_stop = analysis.start, analysis.stop

    system = create_mna(netlist)
    log("Transient analysis: %gs step, %gs stop", h, t_stop)
    log("MNA matrix size: %dx%d", system.size, system.size)

    iterations = 0
    converged = True
    initial = None
    if analysis.uic:
        initial = initial_conditions(netlist)
        system = system.with_x(jnp.zeros(system.size))
        log("UIC: skipping DC operating point, %d initial conditions", len(initial))
    else:
        system, op = solve_operating_point(system, netlist, options=op_options)
        iterations += op.iterations
        converged = op.converged
        if op.converged:
            log("DC OP converged in %d iter", op.iterations)
        else:
            log.warning("DC OP did not converge")

    recorder = SignalRecorder()
    recorder.add_solution_signals(system)
    recorder.record_solution(system, t_start)

    total_steps = count_intervals(t_stop - t_start, h)
    stride = max(1, total_steps // config.MAX_WAVEFORM_POINTS)
    failed_steps = 0
    cancelled = False
    t_prev = t_start
    step = 0

    for step in range(1, total_steps + 1):
        if is_cancelled(cancel):
            cancelled = True
            step -= 1
            break
        t = min(t_start + step * h, t_stop)
        companion = Companion(h=t - t_prev, x_prev=system.x, initial=initial if step == 1 else None)
        assemble_fn = partial(assemble, netlist=netlist, time=t, companion=companion)
        system, result = newton_raphson(system, assemble_fn, options)
        iterations += result.iterations
        if not result.converged:
            if failed_steps == 0:
                log.warning("Step at t=%g did not converge (max delta %.3e)", t, result.max_delta)
            failed_steps += 1
        t_prev = t

        if step % stride == 0 or step == total_steps:
            recorder.record_solution(system, t)
        if progress is not None and step % config.PROGRESS_EVERY_STEPS == 0:
            progress(step / total_steps)

    if cancelled:
        # keep the last accepted point even if it fell between strides
        if step > 0 and step % stride != 0:
            recorder.record_solution(system, t_prev)
        log.warning("Cancelled at t=%g after %d of %d steps", t_prev, step, total_steps)
    elif progress is not None:
        progress(1.0)

    converged = converged and failed_steps == 0
    log("Completed %d time steps, %d NR iterations total", step, iterations)
    if failed_steps:
        log.warning("Warning: %d steps did not converge", failed_steps)
    else:
        log("All steps converged")

    elapsed_ms = (time.perf_counter() - t0) * 1e3
    log("Simulation time: %.1fms", elapsed_ms)

    return SimulationResult(
        analysis=analysis,
        waveform=Waveform(recorder.signals(), "s", (t_start, t_stop)),
        op_point=None,
        converged=converged,
        iterations=iterations,
        elapsed_ms=elapsed_ms,
        log=tuple(log.lines),
        cancelled=cancelled,
    )
