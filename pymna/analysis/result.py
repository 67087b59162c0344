"""Simulation result records (immutable once returned)."""

from __future__ import annotations
import logging
from typing import NamedTuple, Any

import jax

from ..circuit import AnalysisDirective
from ..engine import MNASystem


class Sample(NamedTuple):
    x: float  # time, swept value or frequency
    value: float


class Signal(NamedTuple):
    """A named waveform: ordered (x, value) samples."""
    name: str
    unit: str
    samples: tuple[Sample, ...] = ()

    @property
    def xs(self) -> list[float]:
        return [s.x for s in self.samples]

    @property
    def values(self) -> list[float]:
        return [s.value for s in self.samples]


class Waveform(NamedTuple):
    signals: tuple[Signal, ...] = ()
    x_unit: str = "s"  # "s" transient, "V"/"A" DC sweep, "Hz" AC
    x_range: tuple[float, float] = (0.0, 0.0)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.signals]

    def signal(self, name: str) -> Signal:
        """Signal by exact name; raises KeyError if absent."""
        for s in self.signals:
            if s.name == name:
                return s
        raise KeyError(name)


class SimulationResult(NamedTuple):
    """
    Output of one analysis run.

    converged is False when any Newton solve hit its iteration cap;
    cancelled is True when the caller aborted between steps, in which
    case the waveform holds the samples computed so far.
    """
    analysis: AnalysisDirective
    waveform: Waveform
    op_point: dict[str, float] | None
    converged: bool
    iterations: int
    elapsed_ms: float
    log: tuple[str, ...]
    cancelled: bool = False


class SignalRecorder:
    """Append-only signal builder used while an analysis runs."""

    def __init__(self):
        self._units: dict[str, str] = {}
        self._samples: dict[str, list[Sample]] = {}

    def add(self, name: str, unit: str):
        if name not in self._units:
            self._units[name] = unit
            self._samples[name] = []

    def record(self, name: str, x: float, value: float):
        self._samples[name].append(Sample(float(x), float(value)))

    def record_solution(self, system: MNASystem, x: float, suffix: str = ""):
        """Record V(node) for every node and I(name) for every branch from system.x."""
        values = _host_list(system.x)
        for name, idx in system.node_index.items():
            self.record(f"V({name}){suffix}", x, values[idx])
        for name, idx in system.branch_index.items():
            self.record(f"I({name}){suffix}", x, values[idx])

    def add_solution_signals(self, system: MNASystem, suffix: str = ""):
        for name in system.node_index:
            self.add(f"V({name}){suffix}", "V")
        for name in system.branch_index:
            self.add(f"I({name}){suffix}", "A")

    def signals(self) -> tuple[Signal, ...]:
        return tuple(
            Signal(name, self._units[name], tuple(samples))
            for name, samples in self._samples.items()
        )


class RunLog:
    """Diagnostic lines for SimulationResult.log, mirrored to a logger."""

    def __init__(self, logger: logging.Logger):
        self.lines: list[str] = []
        self._logger = logger

    def __call__(self, message: str, *args: Any):
        self.lines.append(message % args if args else message)
        self._logger.info(message, *args)

    def warning(self, message: str, *args: Any):
        self.lines.append(message % args if args else message)
        self._logger.warning(message, *args)


def solution_map(system: MNASystem) -> dict[str, float]:
    """{"V(node)": value, "I(name)": value} for the system's current x."""
    values = _host_list(system.x)
    op = {f"V({name})": values[idx] for name, idx in system.node_index.items()}
    op.update({f"I({name})": values[idx] for name, idx in system.branch_index.items()})
    return op


def is_cancelled(cancel) -> bool:
    """True when a cancel token (anything with is_set()) has been set."""
    return cancel is not None and cancel.is_set()


def _host_list(x) -> list[float]:
    return [float(v) for v in jax.device_get(x)]
