"""Device factory functions (functional style)."""

from __future__ import annotations

from .netlist import Netlist
from .devices import Resistor, Capacitor, Inductor, VSource, ISource, Mosfet
from .sources import TransientSource


def R(
    net: Netlist,
    node_a: str,
    node_b: str,
    *,
    name: str,
    value: float,
) -> tuple[Netlist, Resistor]:
    """
    Create a resistor.

    Args:
        net: Netlist to add to
        node_a: First terminal
        node_b: Second terminal
        name: Device name
        value: Resistance in Ohms

    Returns:
        (new_netlist, device)

    Example:
        net, r1 = R(net, "in", "out", name="R1", value=1000.0)  # 1 kOhm
    """
    device = Resistor(name, node_a, node_b, value)
    return net.add_device(device), device


def C(
    net: Netlist,
    node_a: str,
    node_b: str,
    *,
    name: str,
    value: float,
    ic: float | None = None,
) -> tuple[Netlist, Capacitor]:
    """
    Create a capacitor.

    Args:
        net: Netlist to add to
        node_a: First terminal (positive for voltage reference)
        node_b: Second terminal
        name: Device name
        value: Capacitance in Farads
        ic: Initial voltage V(node_a) - V(node_b), applied with UIC

    Returns:
        (new_netlist, device)
    """
    device = Capacitor(name, node_a, node_b, value, ic)
    return net.add_device(device), device


def L(
    net: Netlist,
    node_a: str,
    node_b: str,
    *,
    name: str,
    value: float,
    ic: float | None = None,
) -> tuple[Netlist, Inductor]:
    """
    Create an inductor.

    Args:
        net: Netlist to add to
        node_a: First terminal
        node_b: Second terminal
        name: Device name
        value: Inductance in Henrys
        ic: Initial current a -> b, applied with UIC

    Returns:
        (new_netlist, device)
    """
    device = Inductor(name, node_a, node_b, value, ic)
    return net.add_device(device), device


def V(
    net: Netlist,
    node_pos: str,
    node_neg: str,
    *,
    name: str,
    dc: float = 0.0,
    ac_mag: float | None = None,
    ac_phase: float | None = None,
    transient: TransientSource | None = None,
) -> tuple[Netlist, VSource]:
    """
    Create an independent voltage source.

    Args:
        net: Netlist to add to
        node_pos: Positive terminal
        node_neg: Negative terminal
        name: Device name (also the branch-current label, I(name))
        dc: DC value in Volts
        ac_mag: AC magnitude for small-signal analysis
        ac_phase: AC phase in degrees
        transient: Pulse/Sin/Pwl/Exp waveform used by transient analysis

    Returns:
        (new_netlist, device)

    Example:
        net, vin = V(net, "in", "0", name="Vin", dc=0.0, ac_mag=1.0)
    """
    device = VSource(name, node_pos, node_neg, dc, ac_mag, ac_phase, transient)
    return net.add_device(device), device


def I(
    net: Netlist,
    node_pos: str,
    node_neg: str,
    *,
    name: str,
    dc: float = 0.0,
    ac_mag: float | None = None,
    ac_phase: float | None = None,
    transient: TransientSource | None = None,
) -> tuple[Netlist, ISource]:
    """
    Create an independent current source.

    Current flows from node_pos through the source to node_neg, i.e. it
    is drawn out of node_pos and pushed into node_neg.

    Returns:
        (new_netlist, device)
    """
    device = ISource(name, node_pos, node_neg, dc, ac_mag, ac_phase, transient)
    return net.add_device(device), device


def M(
    net: Netlist,
    drain: str,
    gate: str,
    source: str,
    body: str,
    *,
    name: str,
    model: str,
    w: float | None = None,
    l: float | None = None,
    **params: float,
) -> tuple[Netlist, Mosfet]:
    """
    Create a Level-1 MOSFET.

    Args:
        net: Netlist to add to
        drain, gate, source, body: Terminal nodes
        name: Device name
        model: Model name, matched case-insensitively against net.models
        w: Channel width in meters (model default if omitted)
        l: Channel length in meters (model default if omitted)
        **params: Extra instance parameters, kept on the record

    Returns:
        (new_netlist, device)

    Example:
        net, m1 = M(net, "out", "in", "0", "0", name="M1", model="nch", w=2e-6, l=1e-6)
    """
    device = Mosfet(name, drain, gate, source, body, model, w, l, tuple(sorted(params.items())))
    return net.add_device(device), device
