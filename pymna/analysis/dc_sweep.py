"""DC sweep analysis with continuation."""

from __future__ import annotations
import logging
import time
from typing import Callable

from ..circuit import Netlist, DcAnalysis
from ..engine import SolverOptions, create_mna
from .. import config
from .grid import sweep_values
from .op import solve_operating_point
from .result import RunLog, SignalRecorder, SimulationResult, Waveform, is_cancelled

logger = logging.getLogger(__name__)

SWEEPABLE = ("vsource", "isource")


def run_dc_sweep(
    netlist: Netlist,
    analysis: DcAnalysis,
    *,
    progress: Callable[[float], None] | None = None,
    cancel=None,
    options: SolverOptions = SolverOptions(),
) -> SimulationResult:
    """
    Sweep the DC value of an independent source.

    Each point solves the operating point of a copy of the netlist with
    the source's DC value replaced, starting from the previous point's
    solution (continuation). With ``source2`` set, that source forms an
    outer sweep and every inner signal is named "<signal> @ <source2>=<value>"
    (value printed with 12 significant digits).

    Args:
        netlist: Circuit to sweep (never modified)
        analysis: Sweep directive
        progress: Called with the completed fraction every few points
        cancel: Object with is_set(); checked before each point
        options: Newton settings for every point

    Returns:
        SimulationResult with V(node)/I(branch) versus the swept value.
        A missing source yields an empty, unconverged result.
    """
    analysis.validate()
    t0 = time.perf_counter()
    log = RunLog(logger)
    log("DC Sweep: %s from %g to %g, step %g", analysis.source, analysis.start, analysis.stop, analysis.step)

    inner_idx = netlist.find_device(analysis.source, SWEEPABLE)
    outer_idx = -1
    if analysis.source2 is not None:
        outer_idx = netlist.find_device(analysis.source2, SWEEPABLE)

    missing = [name for name, idx in ((analysis.source, inner_idx), (analysis.source2, outer_idx))
               if name is not None and idx < 0]
    if missing:
        for name in missing:
            log.warning('Error: Source "%s" not found', name)
        return SimulationResult(
            analysis=analysis,
            waveform=Waveform((), "V", (analysis.start, analysis.stop)),
            op_point=None,
            converged=False,
            iterations=0,
            elapsed_ms=(time.perf_counter() - t0) * 1e3,
            log=tuple(log.lines),
        )

    inner_dev = netlist.devices[inner_idx]
    x_unit = "V" if inner_dev.kind == "vsource" else "A"
    inner_values = sweep_values(analysis.start, analysis.stop, analysis.step)
    if outer_idx >= 0:
        outer_values = sweep_values(analysis.start2, analysis.stop2, analysis.step2)
    else:
        outer_values = [None]

    # Swept copies share topology, so one index assignment serves every point
    system = create_mna(netlist)
    log("MNA matrix size: %dx%d", system.size, system.size)

    recorder = SignalRecorder()
    total = len(inner_values) * len(outer_values)
    done = 0
    iterations = 0
    failures = 0
    cancelled = False
    initial = None

    for outer in outer_values:
        swept = netlist
        suffix = ""
        if outer is not None:
            swept = swept.replace_device(outer_idx, netlist.devices[outer_idx]._replace(dc=outer))
            suffix = f" @ {analysis.source2}={outer:.12g}"
        recorder.add_solution_signals(system, suffix)

        for value in inner_values:
            if is_cancelled(cancel):
                cancelled = True
                break
            point = swept.replace_device(inner_idx, inner_dev._replace(dc=value))
            system, result = solve_operating_point(
                system, point, initial=initial, options=options,
            )
            initial = system.x
            iterations += result.iterations
            if not result.converged:
                failures += 1
                logger.debug("sweep point %s=%g did not converge", analysis.source, value)

            recorder.record_solution(system, value, suffix)
            done += 1
            if progress is not None and done % config.PROGRESS_EVERY_POINTS == 0:
                progress(done / total)
        if cancelled:
            break

    if cancelled:
        log.warning("Cancelled after %d of %d sweep points", done, total)
    else:
        log("Completed %d sweep points", done)
        if progress is not None:
            progress(1.0)
    if failures:
        log.warning("Warning: %d sweep points did not converge", failures)

    elapsed_ms = (time.perf_counter() - t0) * 1e3
    log("Simulation time: %.1fms", elapsed_ms)

    return SimulationResult(
        analysis=analysis,
        waveform=Waveform(recorder.signals(), x_unit, (analysis.start, analysis.stop)),
        op_point=None,
        converged=failures == 0,
        iterations=iterations,
        elapsed_ms=elapsed_ms,
        log=tuple(log.lines),
        cancelled=cancelled,
    )
