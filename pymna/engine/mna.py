"""MNA system: unknown indexing, conductance matrix and right-hand side.

The unknown vector x is the node voltages (non-ground nodes, first-seen
order) followed by one branch current per voltage-defining element
(independent voltage source, inductor) in device order.

Stamping is functional: every primitive returns a new system, and
contributions always accumulate (never overwrite), so device order does
not matter.

create_mna also compiles a StampPlan: the rows each device touches,
grouped per kind, plus the fixed device values. The assembly kernel in
stamps.py scatters a whole device kind at once from it.
"""

from __future__ import annotations
import logging
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from ..circuit import Netlist, is_ground
from ..circuit.devices import BRANCH_KINDS
from .mosfet import MosParams, resolve_params, stack_params

logger = logging.getLogger(__name__)

GROUND = -1  # index sentinel for the reference node


class StampPlan(NamedTuple):
    """
    Row indices and fixed values per device kind, in device order.

    Ground maps to row ``size``, a padding row the assembly kernel
    discards, so no entry needs masking.
    """
    res_nodes: Array    # (n_r, 2) a, b
    conductance: Array  # (n_r,) 1/R
    cap_nodes: Array    # (n_c, 2) a, b
    capacitance: Array  # (n_c,)
    ind_nodes: Array    # (n_l, 3) a, b, branch row
    inductance: Array   # (n_l,)
    vsrc_nodes: Array   # (n_v, 3) pos, neg, branch row
    isrc_nodes: Array   # (n_i, 2) pos, neg
    mos_nodes: Array    # (n_m, 4) drain, gate, source, body
    mos: MosParams      # fields stacked per instance


class MNASystem(NamedTuple):
    """
    Immutable MNA system (G x = rhs) for one analysis run.

    G and rhs are rebuilt on every solve; x persists between solves and
    is the Newton iterate.
    """
    size: int
    G: Array            # (size, size)
    rhs: Array          # (size,)
    x: Array            # (size,)
    node_index: dict[str, int]    # node name -> row
    branch_index: dict[str, int]  # device name -> branch-current row
    plan: StampPlan | None = None

    @property
    def num_nodes(self) -> int:
        return len(self.node_index)

    def node(self, name: str) -> int:
        """Matrix row for a node, GROUND (-1) for the reference node."""
        if is_ground(name):
            return GROUND
        return self.node_index.get(name, GROUND)

    def branch(self, name: str) -> int:
        """Matrix row of a voltage-defining element's branch current."""
        return self.branch_index[name]

    def stamp(self, i: int, j: int, value) -> MNASystem:
        """Add value into G[i, j]; no-op when either index is ground."""
        if i < 0 or j < 0:
            return self
        return self._replace(G=self.G.at[i, j].add(value))

    def stamp_rhs(self, i: int, value) -> MNASystem:
        """Add value into rhs[i]; no-op on ground."""
        if i < 0:
            return self
        return self._replace(rhs=self.rhs.at[i].add(value))

    def stamp_conductance(self, a: int, b: int, g) -> MNASystem:
        """Two-terminal conductance block between rows a and b."""
        system = self.stamp(a, a, g)
        system = system.stamp(b, b, g)
        system = system.stamp(a, b, -g)
        return system.stamp(b, a, -g)

    def stamp_current(self, a: int, b: int, i) -> MNASystem:
        """Current source of value i flowing a -> b through the source."""
        return self.stamp_rhs(a, -i).stamp_rhs(b, i)

    def clear(self) -> MNASystem:
        """Zero G and rhs, keep x."""
        return self._replace(G=jnp.zeros_like(self.G), rhs=jnp.zeros_like(self.rhs))

    def with_x(self, x: Array) -> MNASystem:
        return self._replace(x=jnp.asarray(x, dtype=self.x.dtype))

    def voltage(self, name: str, x: Array | None = None) -> Array:
        """Node voltage from x (or the given vector); ground reads 0."""
        x = self.x if x is None else x
        i = self.node(name)
        if i < 0:
            return jnp.array(0.0)
        return x[i]


def create_mna(netlist: Netlist) -> MNASystem:
    """
    Assign node and branch indices for a netlist and compile its StampPlan.

    Nodes come from netlist.node_names first, then from any device
    terminal not listed there; ground never gets a row. One branch row
    follows per voltage source and inductor, in device order.

    Returns:
        MNASystem of size num_nodes + num_branches with zeroed G, rhs, x
    """
    node_index: dict[str, int] = {}

    def add_node(name: str):
        if not is_ground(name) and name not in node_index:
            node_index[name] = len(node_index)

    for name in netlist.node_names:
        add_node(name)
    for device in netlist.devices:
        for name in device.terminals:
            add_node(name)

    branch_index: dict[str, int] = {}
    idx = len(node_index)
    for device in netlist.devices:
        if device.kind in BRANCH_KINDS:
            branch_index[device.name] = idx
            idx += 1

    size = idx
    return MNASystem(
        size=size,
        G=jnp.zeros((size, size)),
        rhs=jnp.zeros(size),
        x=jnp.zeros(size),
        node_index=node_index,
        branch_index=branch_index,
        plan=compile_plan(netlist, node_index, branch_index, size),
    )


def compile_plan(
    netlist: Netlist,
    node_index: dict[str, int],
    branch_index: dict[str, int],
    size: int,
) -> StampPlan:
    """
    Group devices per kind into index and value arrays.

    Source values are not part of the plan: they depend on the analysis
    time and are read from the netlist at every assembly.
    """
    def row(name: str) -> int:
        if is_ground(name):
            return size
        return node_index.get(name, size)

    res_nodes, conductance = [], []
    cap_nodes, capacitance = [], []
    ind_nodes, inductance = [], []
    vsrc_nodes, isrc_nodes = [], []
    mos_nodes, mos_params = [], []

    for dev in netlist.devices:
        kind = dev.kind
        if kind == "resistor":
            res_nodes.append((row(dev.node_a), row(dev.node_b)))
            conductance.append(1.0 / dev.value)
        elif kind == "capacitor":
            cap_nodes.append((row(dev.node_a), row(dev.node_b)))
            capacitance.append(dev.value)
        elif kind == "inductor":
            ind_nodes.append((row(dev.node_a), row(dev.node_b), branch_index[dev.name]))
            inductance.append(dev.value)
        elif kind == "vsource":
            vsrc_nodes.append((row(dev.node_pos), row(dev.node_neg), branch_index[dev.name]))
        elif kind == "isource":
            isrc_nodes.append((row(dev.node_pos), row(dev.node_neg)))
        elif kind == "mosfet":
            mos_nodes.append((row(dev.drain), row(dev.gate), row(dev.source), row(dev.body)))
            mos_params.append(resolve_params(dev, netlist))
            if netlist.find_model(dev.model) is None:
                logger.debug("%s: model %r not found, using built-in defaults", dev.name, dev.model)
        else:
            logger.debug("%s: %s devices are not simulated", dev.name, kind)

    return StampPlan(
        res_nodes=_index_array(res_nodes, 2),
        conductance=jnp.asarray(conductance, dtype=float),
        cap_nodes=_index_array(cap_nodes, 2),
        capacitance=jnp.asarray(capacitance, dtype=float),
        ind_nodes=_index_array(ind_nodes, 3),
        inductance=jnp.asarray(inductance, dtype=float),
        vsrc_nodes=_index_array(vsrc_nodes, 3),
        isrc_nodes=_index_array(isrc_nodes, 2),
        mos_nodes=_index_array(mos_nodes, 4),
        mos=stack_params(mos_params),
    )


def _index_array(rows: list[tuple[int, ...]], width: int) -> Array:
    if not rows:
        return jnp.zeros((0, width), dtype=jnp.int32)
    return jnp.asarray(rows, dtype=jnp.int32)
