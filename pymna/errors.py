"""Exception types raised by pymna.

Convergence failures and singular pivots are reported as data on the
simulation result, never raised. Only conditions that make the MNA
system degenerate before the solver is entered surface here.
"""


class SimulationError(Exception):
    """Base class for errors raised before a simulation can start."""


class EmptyCircuitError(SimulationError, ValueError):
    """The netlist has no devices, so there is nothing to simulate."""
