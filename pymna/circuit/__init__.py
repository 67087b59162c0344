"""pymna circuit description.

Immutable records consumed by the simulation engine:
    - Resistor, Capacitor, Inductor, VSource, ISource, Mosfet, GenericDevice
    - Pulse, Sin, Pwl, Exp: transient source waveforms
    - MosModel: MOSFET model card
    - OpAnalysis, DcAnalysis, TranAnalysis, AcAnalysis: analysis directives
    - Netlist: devices + models + directives + node names

Factories R, C, L, V, I, M build a Netlist functionally.
"""

from .sources import Pulse, Sin, Pwl, Exp, TransientSource
from .devices import (
    Resistor,
    Capacitor,
    Inductor,
    VSource,
    ISource,
    Mosfet,
    GenericDevice,
    Device,
    is_ground,
)
from .analyses import OpAnalysis, DcAnalysis, TranAnalysis, AcAnalysis, AnalysisDirective
from .netlist import Netlist, MosModel
from .components import R, C, L, V, I, M

__all__ = [
    # Waveforms
    "Pulse",
    "Sin",
    "Pwl",
    "Exp",
    "TransientSource",
    # Devices
    "Resistor",
    "Capacitor",
    "Inductor",
    "VSource",
    "ISource",
    "Mosfet",
    "GenericDevice",
    "Device",
    "is_ground",
    # Directives
    "OpAnalysis",
    "DcAnalysis",
    "TranAnalysis",
    "AcAnalysis",
    "AnalysisDirective",
    # Netlist
    "Netlist",
    "MosModel",
    # Factories
    "R",
    "C",
    "L",
    "V",
    "I",
    "M",
]
