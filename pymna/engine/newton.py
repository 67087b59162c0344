"""Newton-Raphson driver.

Each iteration re-assembles the system around the current iterate,
solves it, and compares the new solution with the old one:

    maxDelta = max |x_new - x_old|

The run is accepted when maxDelta < tol and the new solution satisfies
the assembled (unregularized) system to within residual_tol. Until
then, the first ``damping_iters`` iterations take a damped step
x <- x_old + damping * (x_new - x_old). A run that hits max_iter is not
an error: the last x is kept and the result is flagged unconverged.
Contradictory constraints (two voltage sources forcing one node to
different values) solve repeatably through a regularized pivot, so only
the residual test catches them.
"""

from __future__ import annotations
import logging
from typing import NamedTuple, Callable

import jax.numpy as jnp

from .. import config
from .linalg import residual, solve
from .mna import MNASystem

logger = logging.getLogger(__name__)


class SolverOptions(NamedTuple):
    """Newton-Raphson settings."""
    max_iter: int = config.NEWTON_MAX_ITER
    tol: float = config.NEWTON_TOL
    damping: float = config.NEWTON_DAMPING
    damping_iters: int = config.NEWTON_DAMPING_ITERS
    residual_tol: float = config.NEWTON_RESIDUAL_TOL


TRANSIENT_OPTIONS = SolverOptions(
    max_iter=config.TRAN_MAX_ITER,
    damping_iters=config.TRAN_DAMPING_ITERS,
)


class NewtonResult(NamedTuple):
    converged: bool
    iterations: int  # linear solves performed
    max_delta: float
    residual: float = 0.0  # relative residual of the last solve


def newton_raphson(
    system: MNASystem,
    assemble_fn: Callable[[MNASystem], MNASystem],
    options: SolverOptions = SolverOptions(),
) -> tuple[MNASystem, NewtonResult]:
    """
    Iterate assemble -> solve until the solution stops moving.

    Args:
        system: System whose x is the initial guess
        assemble_fn: Rebuilds G and rhs around system.x (see stamps.assemble)
        options: Iteration cap, tolerances and damping

    Returns:
        (system with the last computed x, NewtonResult)
    """
    if system.size == 0:
        return system, NewtonResult(True, 0, 0.0)

    max_delta = float("inf")
    res = float("inf")
    for iteration in range(options.max_iter):
        x_old = system.x
        assembled = assemble_fn(system)
        system = solve(assembled)
        max_delta = float(jnp.max(jnp.abs(system.x - x_old)))
        res = float(residual(assembled.G, system.x, assembled.rhs))
        logger.debug("newton iteration %d: max delta %.3e, residual %.3e", iteration + 1, max_delta, res)

        # NaN compares False, so a blown-up iterate never counts as converged
        if max_delta < options.tol and res <= options.residual_tol:
            return system, NewtonResult(True, iteration + 1, max_delta, res)

        if iteration < options.damping_iters:
            system = system.with_x(x_old + options.damping * (system.x - x_old))

    return system, NewtonResult(False, options.max_iter, max_delta, res)
