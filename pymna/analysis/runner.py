"""Analysis dispatch."""

from __future__ import annotations
import logging
from typing import Callable

from ..circuit import Netlist, OpAnalysis, AnalysisDirective
from ..engine import SolverOptions
from ..errors import EmptyCircuitError
from .ac import run_ac
from .dc_sweep import run_dc_sweep
from .op import run_dc_op
from .result import SimulationResult
from .transient import run_transient

logger = logging.getLogger(__name__)


def run_simulation(
    netlist: Netlist,
    analysis: AnalysisDirective | None = None,
    *,
    progress: Callable[[float], None] | None = None,
    cancel=None,
    options: SolverOptions | None = None,
) -> SimulationResult:
    """
    Run one analysis on a netlist.

    Args:
        netlist: Circuit to simulate
        analysis: Directive to run; defaults to the netlist's first
            directive, or a DC operating point if it has none
        progress: Progress callback (fraction in [0, 1])
        cancel: Object with is_set() used to abort between steps
        options: Newton settings; None uses each analysis's defaults

    Returns:
        SimulationResult

    Raises:
        EmptyCircuitError: the netlist has no devices
    """
    if netlist.is_empty:
        raise EmptyCircuitError("Circuit has no devices")

    if analysis is None:
        analysis = netlist.analyses[0] if netlist.analyses else OpAnalysis()

    kind = getattr(analysis, "type", None)
    kwargs = {} if options is None else {"options": options}

    if kind == "op":
        return run_dc_op(netlist, **kwargs)
    if kind == "dc":
        return run_dc_sweep(netlist, analysis, progress=progress, cancel=cancel, **kwargs)
    if kind == "tran":
        return run_transient(netlist, analysis, progress=progress, cancel=cancel, **kwargs)
    if kind == "ac":
        return run_ac(netlist, analysis, progress=progress, cancel=cancel, **kwargs)

    logger.info("Unsupported analysis %r, running DC operating point", kind)
    result = run_dc_op(netlist, **kwargs)
    note = f"Analysis type {kind!r} not supported, ran DC operating point"
    return result._replace(log=(note,) + result.log)


def run_all(netlist: Netlist, **kwargs) -> list[SimulationResult]:
    """Run every directive of the netlist in order (a DC-OP if there are none)."""
    analyses = netlist.analyses or (OpAnalysis(),)
    return [run_simulation(netlist, analysis, **kwargs) for analysis in analyses]
