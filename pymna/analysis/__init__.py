"""pymna analyses: DC operating point, DC sweep, transient and AC.

    - run_simulation: dispatch on a directive's type
    - run_dc_op, run_dc_sweep, run_transient, run_ac: the drivers
    - SimulationResult, Waveform, Signal, Sample: immutable results
    - submit_simulation, SimulationJob: background runs with progress
      and cancellation
"""

from .result import Sample, Signal, Waveform, SimulationResult
from .grid import sweep_values, frequency_points
from .op import run_dc_op, solve_operating_point
from .dc_sweep import run_dc_sweep
from .transient import run_transient, initial_conditions
from .ac import run_ac, magnitude_db, phase_deg
from .runner import run_simulation, run_all
from .jobs import SimulationJob, submit_simulation

__all__ = [
    # Results
    "Sample",
    "Signal",
    "Waveform",
    "SimulationResult",
    # Grids
    "sweep_values",
    "frequency_points",
    # Drivers
    "run_dc_op",
    "solve_operating_point",
    "run_dc_sweep",
    "run_transient",
    "initial_conditions",
    "run_ac",
    "magnitude_db",
    "phase_deg",
    # Dispatch
    "run_simulation",
    "run_all",
    "SimulationJob",
    "submit_simulation",
]
