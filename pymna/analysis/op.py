"""DC operating point analysis."""

from __future__ import annotations
import logging
import time
from functools import partial

import jax.numpy as jnp
from jax import Array

from ..circuit import Netlist, OpAnalysis
from ..engine import MNASystem, SolverOptions, NewtonResult, assemble, create_mna, newton_raphson
from .result import RunLog, SignalRecorder, SimulationResult, Waveform, solution_map

logger = logging.getLogger(__name__)


def warm_start(system: MNASystem, netlist: Netlist) -> MNASystem:
    """Zero initial guess with each voltage source's positive node at its DC value."""
    x = jnp.zeros(system.size)
    for dev in netlist.devices:
        if dev.kind == "vsource":
            p = system.node(dev.node_pos)
            if p >= 0:
                x = x.at[p].set(dev.dc)
    return system.with_x(x)


def solve_operating_point(
    system: MNASystem,
    netlist: Netlist,
    *,
    initial: Array | None = None,
    options: SolverOptions = SolverOptions(),
) -> tuple[MNASystem, NewtonResult]:
    """
    Newton solve of the DC circuit (capacitors open, inductors shorted).

    Args:
        system: System built by create_mna for this netlist
        netlist: Devices to solve
        initial: Initial guess; None uses warm_start
        options: Newton settings

    Returns:
        (system holding the operating point in x, NewtonResult)
    """
    if initial is None:
        system = warm_start(system, netlist)
    else:
        system = system.with_x(initial)
    return newton_raphson(system, partial(assemble, netlist=netlist), options)


def run_dc_op(netlist: Netlist, *, options: SolverOptions = SolverOptions()) -> SimulationResult:
    """
    Run a DC operating point analysis.

    Returns:
        SimulationResult whose op_point maps "V(node)" / "I(name)" to
        values; the waveform holds one sample (x=0) per quantity.
    """
    t0 = time.perf_counter()
    log = RunLog(logger)

    system = create_mna(netlist)
    log("MNA matrix size: %dx%d", system.size, system.size)
    log("Nodes: %s", ", ".join(system.node_index))

    system, result = solve_operating_point(system, netlist, options=options)
    if result.converged:
        log("Converged in %d iterations", result.iterations)
    else:
        log.warning("Did not converge after %d iterations", result.iterations)

    op_point = solution_map(system)
    for name, value in op_point.items():
        log("  %s = %.6f", name, value)

    recorder = SignalRecorder()
    recorder.add_solution_signals(system)
    recorder.record_solution(system, 0.0)

    elapsed_ms = (time.perf_counter() - t0) * 1e3
    log("Simulation time: %.1fms", elapsed_ms)

    return SimulationResult(
        analysis=OpAnalysis(),
        waveform=Waveform(recorder.signals(), "s", (0.0, 0.0)),
        op_point=op_point,
        converged=result.converged,
        iterations=result.iterations,
        elapsed_ms=elapsed_ms,
        log=tuple(log.lines),
    )
