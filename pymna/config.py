"""Default numeric settings for pymna simulations.

This module centralizes the constants shared by the engine and the
analysis drivers. Per-call overrides of the Newton settings go through
``pymna.engine.SolverOptions``.
"""

# Newton-Raphson
NEWTON_MAX_ITER = 100
NEWTON_TOL = 1e-6
NEWTON_DAMPING = 0.5  # x <- x_old + NEWTON_DAMPING * (x_new - x_old)
NEWTON_DAMPING_ITERS = 10
# Accept an iterate only if it also solves the assembled system:
# max|G x - rhs| <= NEWTON_RESIDUAL_TOL * max|rhs|
NEWTON_RESIDUAL_TOL = 1e-6
RESIDUAL_FLOOR = 1e-30

# Transient steps start from the previous accepted solution
TRAN_MAX_ITER = 50
TRAN_DAMPING_ITERS = 0

# Gaussian elimination: pivots below PIVOT_FLOOR get REGULARIZATION added
PIVOT_FLOOR = 1e-18
REGULARIZATION = 1e-12

# MOSFET output conductance floor (keeps cutoff rows non-singular)
GDS_MIN = 1e-12

# Transient output is downsampled to at most ~MAX_WAVEFORM_POINTS samples
MAX_WAVEFORM_POINTS = 2000

# Progress callback cadence
PROGRESS_EVERY_STEPS = 100  # transient time steps
PROGRESS_EVERY_POINTS = 10  # sweep / frequency points

# AC magnitudes at or below AC_MAG_EPS are reported as AC_DB_FLOOR
AC_MAG_EPS = 1e-20
AC_DB_FLOOR = -400.0

# Sweep and step counts are rounded to this many decimals before ceil()
# so float noise in (stop - start) / step does not add a point
GRID_ROUND_DIGITS = 9

# Permittivity of SiO2 (F/m), for default gate oxide capacitance
EPS_OX = 3.9 * 8.854e-12
