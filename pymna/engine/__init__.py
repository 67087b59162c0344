"""pymna engine: MNA assembly and solvers.

    - MNASystem, create_mna, StampPlan: unknown indexing, the G x = rhs
      system and the per-kind stamp layout
    - stamps: vectorized device assembly (linear, companions, MOSFET, AC)
    - mosfet: Level-1 model and parameter resolution
    - gauss_solve, solve, solve_complex, residual: dense elimination kernel
    - newton_raphson, SolverOptions: nonlinear driver
"""

from .mna import MNASystem, StampPlan, create_mna, GROUND
from .mosfet import (
    MosParams,
    MosCurrent,
    default_params,
    resolve_params,
    stack_params,
    mosfet_current,
    operating_region,
)
from .stamps import Companion, assemble, source_values, ac_susceptance, ac_excitation
from .linalg import gauss_solve, solve, solve_complex, residual
from .newton import SolverOptions, NewtonResult, TRANSIENT_OPTIONS, newton_raphson

__all__ = [
    # MNA system
    "MNASystem",
    "StampPlan",
    "create_mna",
    "GROUND",
    # MOSFET
    "MosParams",
    "MosCurrent",
    "default_params",
    "resolve_params",
    "stack_params",
    "mosfet_current",
    "operating_region",
    # Stamps
    "Companion",
    "assemble",
    "source_values",
    "ac_susceptance",
    "ac_excitation",
    # Linear solver
    "gauss_solve",
    "solve",
    "solve_complex",
    "residual",
    # Newton
    "SolverOptions",
    "NewtonResult",
    "TRANSIENT_OPTIONS",
    "newton_raphson",
]
