"""pymna - JAX-based Modified Nodal Analysis circuit simulation core.

This package turns a structured netlist (devices, models, analysis
directives) into voltage/current waveforms:
    - circuit: device records, transient source waveforms, netlist building
    - engine: MNA system, device stamps, MOSFET model, linear and Newton solvers
    - analysis: DC operating point, DC sweep, transient and AC drivers

Usage:
    from pymna.circuit import Netlist, R, C, V
    from pymna.analysis import run_simulation
"""

import jax

# Volt-scale tolerances of 1e-6 and 1e-12 conductance floors need doubles
jax.config.update("jax_enable_x64", True)

__version__ = "0.1.0"
__all__ = ["circuit", "engine", "analysis", "config", "errors", "__version__"]
