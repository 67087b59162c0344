"""Sweep, time-step and frequency grids."""

from __future__ import annotations
import math

from .. import config


def count_intervals(span: float, step: float) -> int:
    """ceil(span / step), ignoring float noise below config.GRID_ROUND_DIGITS."""
    if step == 0 or span == 0:
        return 0
    return max(0, math.ceil(round(span / step, config.GRID_ROUND_DIGITS)))


def sweep_values(start: float, stop: float, step: float) -> list[float]:
    """
    Inclusive sweep grid: ceil((stop - start) / step) + 1 points.

    Values are start + i * step, with the last one clamped to stop.
    """
    n = count_intervals(stop - start, step)
    values = [start + i * step for i in range(n + 1)]
    if n > 0:
        values[-1] = stop
    return values


def frequency_points(variation: str, points: int, fstart: float, fstop: float) -> list[float]:
    """
    AC frequency grid.

    dec/oct (any case): ceil(decades_or_octaves * points) + 1 frequencies
    fstart * base ** (i / points); anything else: points + 1 evenly spaced.
    """
    variation = variation.lower()
    if variation in ("dec", "oct"):
        base = 10.0 if variation == "dec" else 2.0
        span = math.log(fstop / fstart, base) * points
        total = max(0, math.ceil(round(span, config.GRID_ROUND_DIGITS)))
        return [fstart * base ** (i / points) for i in range(total + 1)]
    step = (fstop - fstart) / points
    return [fstart + i * step for i in range(points + 1)]
