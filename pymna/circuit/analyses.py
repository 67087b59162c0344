"""Analysis directives (what to simulate)."""

from __future__ import annotations
from typing import NamedTuple


class OpAnalysis(NamedTuple):
    """DC operating point."""
    type = "op"

    def validate(self) -> None:
        pass


class DcAnalysis(NamedTuple):
    """
    DC sweep of an independent source.

    The optional second source forms an outer sweep: for each of its
    values, ``source`` is swept from start to stop.
    """
    source: str
    start: float
    stop: float
    step: float
    source2: str | None = None
    start2: float | None = None
    stop2: float | None = None
    step2: float | None = None
    type = "dc"

    def validate(self) -> None:
        if self.source2 is not None and None in (self.start2, self.stop2, self.step2):
            raise ValueError(f"DC sweep of {self.source2} needs start2, stop2 and step2")


class TranAnalysis(NamedTuple):
    """Transient analysis from ``start`` to ``stop`` with fixed step."""
    step: float
    stop: float
    start: float = 0.0
    max_step: float | None = None
    uic: bool = False  # skip the operating point, use device ic values
    type = "tran"

    def validate(self) -> None:
        if self.step <= 0:
            raise ValueError(f"Transient step must be positive, got {self.step}")
        if self.max_step is not None and self.max_step <= 0:
            raise ValueError(f"Transient max step must be positive, got {self.max_step}")
        if self.stop < self.start:
            raise ValueError(f"Transient stop {self.stop} is before start {self.start}")


class AcAnalysis(NamedTuple):
    """
    AC small-signal frequency sweep.

    variation: "dec" / "oct" (points per decade / octave), case-insensitive;
    anything else is a linear sweep of ``points`` intervals between fstart
    and fstop.
    """
    variation: str
    points: int
    fstart: float
    fstop: float
    type = "ac"

    @property
    def sweep(self) -> str:
        """Normalized variation: "dec", "oct" or "lin"."""
        variation = self.variation.lower()
        return variation if variation in ("dec", "oct") else "lin"

    def validate(self) -> None:
        if self.points <= 0:
            raise ValueError(f"AC points must be positive, got {self.points}")
        if self.sweep != "lin" and self.fstart <= 0:
            raise ValueError(f"Logarithmic AC sweep needs fstart > 0, got {self.fstart}")
        if self.fstop < self.fstart:
            raise ValueError(f"AC fstop {self.fstop} is below fstart {self.fstart}")


AnalysisDirective = OpAnalysis | DcAnalysis | TranAnalysis | AcAnalysis
