"""Device stamp library.

Every device kind is stamped in one vectorized scatter from the
StampPlan compiled by create_mna:

    resistor        conductance block g = 1/R
    voltage source  branch row/column (+1/-1), rhs[k] = v(t)
    current source  rhs[pos] -= i(t), rhs[neg] += i(t)
    capacitor       open at DC; Backward Euler companion geq = C/h,
                    ieq = geq * v_prev in transient; j*w*C in AC
    inductor        0 V branch at DC; companion diagonal -L/h and
                    rhs[k] = -(L/h) * i_prev in transient; -j*w*L in AC
    MOSFET          linearization around the present iterate

Matrices are built one row and column larger than the system; ground
terminals point at that padding row, which is dropped at the end.
"""

from __future__ import annotations
import math
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array

from ..circuit import Netlist
from .mna import MNASystem, StampPlan
from .mosfet import mosfet_current


class Companion(NamedTuple):
    """
    Backward Euler history for one transient step.

    h: step size
    x_prev: solution at the previous accepted time point
    initial: device name -> ic value, overriding x_prev (first UIC step)
    """
    h: float
    x_prev: Array
    initial: dict[str, float] | None = None


def _conductance_block(G: Array, a: Array, b: Array, g: Array) -> Array:
    G = G.at[a, a].add(g)
    G = G.at[b, b].add(g)
    G = G.at[a, b].add(-g)
    return G.at[b, a].add(-g)


def _branch_block(G: Array, a: Array, b: Array, k: Array) -> Array:
    """Branch current k leaves node a and enters node b; row k reads V(a) - V(b)."""
    G = G.at[k, a].add(1.0)
    G = G.at[k, b].add(-1.0)
    G = G.at[a, k].add(1.0)
    return G.at[b, k].add(-1.0)


@jax.jit
def _assemble_kernel(plan: StampPlan, x: Array, vsrc: Array, isrc: Array, history) -> tuple[Array, Array]:
    n = x.shape[0] + 1
    G = jnp.zeros((n, n))
    rhs = jnp.zeros(n)
    xg = jnp.append(x, 0.0)

    a, b = plan.res_nodes.T
    G = _conductance_block(G, a, b, plan.conductance)

    p, m, k = plan.vsrc_nodes.T
    G = _branch_block(G, p, m, k)
    rhs = rhs.at[k].add(vsrc)

    p, m = plan.isrc_nodes.T
    rhs = rhs.at[p].add(-isrc).at[m].add(isrc)

    # Inductors are 0 V branches; the companion adds the -L/h diagonal
    a, b, k = plan.ind_nodes.T
    G = _branch_block(G, a, b, k)

    if history is not None:
        h, x_prev, cap_ic, ind_ic = history
        xp = jnp.append(x_prev, 0.0)

        a, b = plan.cap_nodes.T
        v_prev = xp[a] - xp[b]
        if cap_ic is not None:
            v_prev = jnp.where(jnp.isnan(cap_ic), v_prev, cap_ic)
        geq = plan.capacitance / h
        ieq = geq * v_prev
        G = _conductance_block(G, a, b, geq)
        # ieq is injected into node a, i.e. flows b -> a through the source
        rhs = rhs.at[a].add(ieq).at[b].add(-ieq)

        a, b, k = plan.ind_nodes.T
        i_prev = xp[k]
        if ind_ic is not None:
            i_prev = jnp.where(jnp.isnan(ind_ic), i_prev, ind_ic)
        leq = plan.inductance / h
        G = G.at[k, k].add(-leq)
        rhs = rhs.at[k].add(-leq * i_prev)

    # MOSFETs: Ids ~= gm Vgs + gds Vds + ieq with ieq = Ids - gm Vgs0 - gds Vds0,
    # so re-solving reproduces Ids exactly at convergence
    d, g, s, body = plan.mos_nodes.T
    vs = xg[s]
    vgs = xg[g] - vs
    vds = xg[d] - vs
    op = mosfet_current(vgs, vds, plan.mos, xg[body] - vs)
    ieq = op.ids - op.gm * vgs - op.gds * vds
    G = _conductance_block(G, d, s, op.gds)
    G = G.at[d, g].add(op.gm).at[d, s].add(-op.gm)
    G = G.at[s, g].add(-op.gm).at[s, s].add(op.gm)
    rhs = rhs.at[d].add(-ieq).at[s].add(ieq)

    return G[:-1, :-1], rhs[:-1]


def source_values(netlist: Netlist, time: float | None = None) -> tuple[Array, Array]:
    """Voltage and current source values at ``time`` (DC values if None), in device order."""
    vsrc, isrc = [], []
    for dev in netlist.devices:
        if dev.kind == "vsource":
            vsrc.append(dev.value_at(time))
        elif dev.kind == "isource":
            isrc.append(dev.value_at(time))
    return jnp.asarray(vsrc, dtype=float), jnp.asarray(isrc, dtype=float)


def _initial_values(netlist: Netlist, kind: str, initial: dict[str, float]) -> Array | None:
    values = [initial.get(dev.name, math.nan) for dev in netlist.devices if dev.kind == kind]
    if all(math.isnan(v) for v in values):
        return None
    return jnp.asarray(values, dtype=float)


def _check_layout(plan: StampPlan, vsrc: Array, isrc: Array):
    if vsrc.shape[0] != plan.vsrc_nodes.shape[0] or isrc.shape[0] != plan.isrc_nodes.shape[0]:
        raise ValueError("Netlist sources do not match the system it was compiled from")


def assemble(
    system: MNASystem,
    netlist: Netlist,
    *,
    time: float | None = None,
    companion: Companion | None = None,
) -> MNASystem:
    """
    One full assembly pass: linear devices, companions, MOSFETs.

    Fixed device values come from system.plan; only source values (and
    ic overrides) are read from ``netlist``, so a value-only copy of the
    netlist the system was created from can be passed (DC sweep).

    Args:
        system: System whose x is the current iterate
        netlist: Devices to stamp
        time: Transient time point (None for DC)
        companion: Backward Euler history (transient only)

    Returns:
        System with G and rhs rebuilt and x unchanged
    """
    vsrc, isrc = source_values(netlist, time)
    _check_layout(system.plan, vsrc, isrc)

    history = None
    if companion is not None:
        initial = companion.initial or {}
        history = (
            companion.h,
            companion.x_prev,
            _initial_values(netlist, "capacitor", initial),
            _initial_values(netlist, "inductor", initial),
        )

    G, rhs = _assemble_kernel(system.plan, system.x, vsrc, isrc, history)
    return system._replace(G=G, rhs=rhs)


@jax.jit
def _susceptance_kernel(plan: StampPlan, x: Array, omega) -> Array:
    n = x.shape[0] + 1
    B = jnp.zeros((n, n))
    a, b = plan.cap_nodes.T
    B = _conductance_block(B, a, b, omega * plan.capacitance)
    a, b, k = plan.ind_nodes.T
    B = B.at[k, k].add(-omega * plan.inductance)
    return B[:-1, :-1]


def ac_susceptance(system: MNASystem, omega: float) -> Array:
    """
    Imaginary part of the AC admittance matrix at angular frequency omega.

    Capacitors add w*C in the resistor pattern; inductors add -w*L on
    their branch diagonal.
    """
    return _susceptance_kernel(system.plan, system.x, omega)


def ac_excitation(system: MNASystem, netlist: Netlist) -> tuple[Array, Array]:
    """
    Small-signal right-hand side from source AC phasors.

    Sources without a nonzero AC magnitude contribute nothing (their DC
    values are not small-signal quantities).

    Returns:
        (real_rhs, imag_rhs)
    """
    phasors = {"vsource": ([], []), "isource": ([], [])}
    for dev in netlist.devices:
        if dev.kind not in phasors:
            continue
        re, im = phasors[dev.kind]
        mag = dev.ac_mag or 0.0
        phase = math.radians(dev.ac_phase or 0.0)
        re.append(mag * math.cos(phase))
        im.append(mag * math.sin(phase))

    v_re, v_im = (jnp.asarray(v, dtype=float) for v in phasors["vsource"])
    i_re, i_im = (jnp.asarray(v, dtype=float) for v in phasors["isource"])
    plan = system.plan
    _check_layout(plan, v_re, i_re)

    n = system.size + 1
    _, _, k = plan.vsrc_nodes.T
    p, m = plan.isrc_nodes.T
    real = jnp.zeros(n).at[k].add(v_re).at[p].add(-i_re).at[m].add(i_re)
    imag = jnp.zeros(n).at[k].add(v_im).at[p].add(-i_im).at[m].add(i_im)
    return real[:-1], imag[:-1]
