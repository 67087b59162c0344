"""Device records (tagged variants, immutable).

Every record carries a class-level ``kind`` tag; the stamp dispatcher
matches on it. Records are produced by the netlist parser (or the
factories in ``components``) and are only ever read by the engine.
"""

from __future__ import annotations
from typing import NamedTuple

from .sources import TransientSource

GROUND_NAMES = ("0", "gnd")


def is_ground(node: str) -> bool:
    """True for the reference node ("0" or any casing of "gnd")."""
    return node.lower() in GROUND_NAMES


class Resistor(NamedTuple):
    name: str
    node_a: str
    node_b: str
    value: float  # Ohms
    kind = "resistor"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.node_a, self.node_b)


class Capacitor(NamedTuple):
    name: str
    node_a: str
    node_b: str
    value: float  # Farads
    ic: float | None = None  # initial voltage, used with UIC
    kind = "capacitor"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.node_a, self.node_b)


class Inductor(NamedTuple):
    name: str
    node_a: str
    node_b: str
    value: float  # Henrys
    ic: float | None = None  # initial current, used with UIC
    kind = "inductor"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.node_a, self.node_b)


class VSource(NamedTuple):
    """Independent voltage source; adds a branch current to the unknowns."""
    name: str
    node_pos: str
    node_neg: str
    dc: float = 0.0
    ac_mag: float | None = None
    ac_phase: float | None = None  # degrees
    transient: TransientSource | None = None
    kind = "vsource"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.node_pos, self.node_neg)

    def value_at(self, time: float | None) -> float:
        """DC value, or the transient waveform at ``time`` when one is set."""
        if time is not None and self.transient is not None:
            return self.transient.value_at(time)
        return self.dc


class ISource(NamedTuple):
    """Independent current source, current flows pos -> neg through the source."""
    name: str
    node_pos: str
    node_neg: str
    dc: float = 0.0
    ac_mag: float | None = None
    ac_phase: float | None = None
    transient: TransientSource | None = None
    kind = "isource"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.node_pos, self.node_neg)

    def value_at(self, time: float | None) -> float:
        if time is not None and self.transient is not None:
            return self.transient.value_at(time)
        return self.dc


class Mosfet(NamedTuple):
    """Four-terminal MOSFET instance referencing a model by name."""
    name: str
    drain: str
    gate: str
    source: str
    body: str
    model: str
    w: float | None = None
    l: float | None = None
    params: tuple[tuple[str, float], ...] = ()  # extra instance parameters
    kind = "mosfet"

    @property
    def terminals(self) -> tuple[str, ...]:
        return (self.drain, self.gate, self.source, self.body)


class GenericDevice(NamedTuple):
    """
    A device kind this core does not simulate (diode, BJT, subcircuit call).

    Kept so parser output passes through untouched; the stamp dispatcher
    skips it.
    """
    name: str
    kind: str
    nodes: tuple[str, ...] = ()

    @property
    def terminals(self) -> tuple[str, ...]:
        return self.nodes


Device = Resistor | Capacitor | Inductor | VSource | ISource | Mosfet | GenericDevice

# Devices that add a branch current to the unknown vector
BRANCH_KINDS = ("vsource", "inductor")
