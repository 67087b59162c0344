"""AC small-signal analysis."""

from __future__ import annotations
import logging
import math
import time
from typing import Callable

import jax.numpy as jnp

from ..circuit import Netlist, AcAnalysis
from ..engine import (
    SolverOptions,
    ac_excitation,
    ac_susceptance,
    assemble,
    create_mna,
    solve_complex,
)
from .. import config
from .grid import frequency_points
from .op import solve_operating_point
from .result import RunLog, SignalRecorder, SimulationResult, Waveform, is_cancelled, solution_map

logger = logging.getLogger(__name__)


def magnitude_db(re: float, im: float) -> float:
    """20 log10 |re + j im|, floored at config.AC_DB_FLOOR for a zero phasor."""
    mag = math.hypot(re, im)
    if mag <= config.AC_MAG_EPS:
        return config.AC_DB_FLOOR
    return 20.0 * math.log10(mag)


def phase_deg(re: float, im: float) -> float:
    return math.degrees(math.atan2(im, re))


def run_ac(
    netlist: Netlist,
    analysis: AcAnalysis,
    *,
    progress: Callable[[float], None] | None = None,
    cancel=None,
    options: SolverOptions = SolverOptions(),
) -> SimulationResult:
    """
    Small-signal frequency sweep around the DC operating point.

    The circuit is linearized once at the operating point (MOSFETs as
    gm/gds). For each frequency the complex system
    (G + j B(w)) x = b is solved, where B holds the capacitor and
    inductor susceptances and b the sources' AC phasors.

    Args:
        netlist: Circuit to analyze
        analysis: AC directive
        progress: Called with the completed fraction every
            config.PROGRESS_EVERY_POINTS frequencies
        cancel: Object with is_set(); checked before each frequency
        options: Newton settings for the operating point

    Returns:
        SimulationResult with VDB(node) (dB) then VP(node) (degrees) per
        node versus frequency; converged and iterations describe the
        operating point.
    """
    analysis.validate()
    t0 = time.perf_counter()
    log = RunLog(logger)
    if analysis.sweep != analysis.variation:
        if analysis.variation.lower() == analysis.sweep:
            logger.debug("AC variation %r read as %r", analysis.variation, analysis.sweep)
        else:
            log.warning("Unknown AC variation %r, using a linear sweep", analysis.variation)
    log("AC analysis: %s %d points, %g Hz to %g Hz",
        analysis.sweep, analysis.points, analysis.fstart, analysis.fstop)

    system = create_mna(netlist)
    log("MNA matrix size: %dx%d", system.size, system.size)

    system, op = solve_operating_point(system, netlist, options=options)
    if op.converged:
        log("DC OP converged in %d iter", op.iterations)
    else:
        log.warning("DC OP did not converge, linearizing at the last iterate")

    G = assemble(system, netlist).G
    br, bi = ac_excitation(system, netlist)
    if not bool(jnp.any(br != 0) | jnp.any(bi != 0)):
        log.warning("No AC sources: all responses are zero")

    freqs = frequency_points(analysis.sweep, analysis.points, analysis.fstart, analysis.fstop)
    nodes = list(system.node_index.items())

    recorder = SignalRecorder()
    for name, _ in nodes:
        recorder.add(f"VDB({name})", "dB")
    for name, _ in nodes:
        recorder.add(f"VP({name})", "deg")

    cancelled = False
    done = 0
    for freq in freqs:
        if is_cancelled(cancel):
            cancelled = True
            break
        omega = 2.0 * math.pi * freq
        xr, xi = solve_complex(G, ac_susceptance(system, omega), br, bi)
        xr = [float(v) for v in xr]
        xi = [float(v) for v in xi]
        for name, idx in nodes:
            recorder.record(f"VDB({name})", freq, magnitude_db(xr[idx], xi[idx]))
            recorder.record(f"VP({name})", freq, phase_deg(xr[idx], xi[idx]))
        done += 1
        if progress is not None and done % config.PROGRESS_EVERY_POINTS == 0:
            progress(done / len(freqs))

    if cancelled:
        log.warning("Cancelled after %d of %d frequency points", done, len(freqs))
    else:
        log("Completed %d frequency points", done)
        if progress is not None:
            progress(1.0)

    elapsed_ms = (time.perf_counter() - t0) * 1e3
    log("Simulation time: %.1fms", elapsed_ms)

    return SimulationResult(
        analysis=analysis,
        waveform=Waveform(recorder.signals(), "Hz", (analysis.fstart, analysis.fstop)),
        op_point=solution_map(system),
        converged=op.converged,
        iterations=op.iterations,
        elapsed_ms=elapsed_ms,
        log=tuple(log.lines),
        cancelled=cancelled,
    )
