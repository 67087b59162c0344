"""Transient source waveforms (closed-form functions of time).

Each waveform is an immutable record with a ``value_at(t)`` method. The
MNA system is never consulted: a source is evaluated fresh at every
requested time point.
"""

from __future__ import annotations
import math
from typing import NamedTuple


class Pulse(NamedTuple):
    """Periodic trapezoidal pulse between v1 and v2."""
    v1: float
    v2: float
    delay: float = 0.0
    rise: float = 0.0
    fall: float = 0.0
    width: float = 0.0
    period: float = 0.0  # <= 0 means a single pulse
    kind = "pulse"

    def value_at(self, t: float) -> float:
        if t < self.delay:
            return self.v1
        t_mod = t - self.delay
        if self.period > 0:
            t_mod = math.fmod(t_mod, self.period)
        if t_mod < self.rise:
            return self.v1 + (self.v2 - self.v1) * (t_mod / self.rise)
        if t_mod < self.rise + self.width:
            return self.v2
        if t_mod < self.rise + self.width + self.fall:
            return self.v2 + (self.v1 - self.v2) * ((t_mod - self.rise - self.width) / self.fall)
        return self.v1


class Sin(NamedTuple):
    """Damped sinusoid; phase in degrees."""
    offset: float
    amplitude: float
    frequency: float
    delay: float = 0.0
    damping: float = 0.0
    phase: float = 0.0
    kind = "sin"

    def value_at(self, t: float) -> float:
        if t < self.delay:
            return self.offset
        td = t - self.delay
        damp = math.exp(-self.damping * td) if self.damping > 0 else 1.0
        angle = 2 * math.pi * self.frequency * td + math.radians(self.phase)
        return self.offset + self.amplitude * damp * math.sin(angle)


class Pwl(NamedTuple):
    """
    Piecewise-linear waveform.

    points: ((time, value), ...) in ascending time order. The value is
    held flat before the first point and after the last one.
    """
    points: tuple[tuple[float, float], ...] = ()
    kind = "pwl"

    def value_at(self, t: float) -> float:
        points = self.points
        if not points:
            return 0.0
        if t <= points[0][0]:
            return points[0][1]
        if t >= points[-1][0]:
            return points[-1][1]
        for (t0, v0), (t1, v1) in zip(points, points[1:]):
            if t <= t1:
                if t1 == t0:
                    return v1
                return v0 + (t - t0) / (t1 - t0) * (v1 - v0)
        return points[-1][1]


class Exp(NamedTuple):
    """Two-time-constant exponential: rises v1->v2 at td1, falls back at td2."""
    v1: float
    v2: float
    td1: float = 0.0
    tau1: float = 0.0
    td2: float = 0.0
    tau2: float = 0.0
    kind = "exp"

    def value_at(self, t: float) -> float:
        if t < self.td1:
            return self.v1
        value = self.v1 + (self.v2 - self.v1) * _charge(t - self.td1, self.tau1)
        if t < self.td2:
            return value
        return value + (self.v1 - self.v2) * _charge(t - self.td2, self.tau2)


def _charge(elapsed: float, tau: float) -> float:
    """1 - exp(-elapsed/tau); a zero time constant is an instant step."""
    if tau <= 0:
        return 1.0
    return 1.0 - math.exp(-elapsed / tau)


TransientSource = Pulse | Sin | Pwl | Exp
