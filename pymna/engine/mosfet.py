"""Level-1 (Shichman-Hodge) MOSFET model.

Regions, with Vgs/Vds sign-flipped for PMOS, Vth = |vth0| and
beta = kp * W / L:

    cutoff      Vgs <= Vth           Ids = 0
    triode      Vds <  Vov           Ids = beta (Vov Vds - Vds^2 / 2)(1 + lambda Vds)
    saturation  Vds >= Vov           Ids = beta Vov^2 / 2 (1 + lambda Vds)

with Vov = Vgs - Vth. Body effect is not modelled: vbs is accepted and
ignored. The current function is written with jnp.where so it can be
traced by jax.grad.
"""

from __future__ import annotations
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from .. import config
from ..circuit import Mosfet, Netlist


class MosParams(NamedTuple):
    """Resolved Level-1 parameters for one instance."""
    vth0: float
    kp: float
    lambda_: float
    tox: float
    cox: float
    cgso: float
    cgdo: float
    cbd: float
    cbs: float
    w: float
    l: float
    is_pmos: bool

    @property
    def beta(self) -> float:
        return self.kp * self.w / self.l


class MosCurrent(NamedTuple):
    """Drain current and small-signal conductances at an operating point."""
    ids: Array  # drain -> source current (negative for a conducting PMOS)
    gm: Array   # dIds/dVgs
    gds: Array  # dIds/dVds, floored at config.GDS_MIN
    gmb: Array  # body transconductance, always 0


def default_params(is_pmos: bool) -> MosParams:
    """Built-in parameters used when no model card matches."""
    tox = 9e-9
    return MosParams(
        vth0=-0.4 if is_pmos else 0.4,
        kp=60e-6 if is_pmos else 120e-6,
        lambda_=0.04,
        tox=tox,
        cox=config.EPS_OX / tox,
        cgso=0.3e-12,
        cgdo=0.3e-12,
        cbd=0.1e-12,
        cbs=0.1e-12,
        w=1e-6,
        l=0.13e-6,
        is_pmos=is_pmos,
    )


def resolve_params(device: Mosfet, netlist: Netlist) -> MosParams:
    """
    Merge built-in defaults, the instance's model card and instance W/L.

    A model name with no matching card is not an error: polarity is
    inferred from the name ("pmos"/"pfet") and the defaults are used.
    """
    model = netlist.find_model(device.model)
    if model is not None:
        is_pmos = model.is_pmos
    else:
        name = device.model.lower()
        is_pmos = "pmos" in name or "pfet" in name
    params = default_params(is_pmos)

    if model is not None:
        overrides = {}
        for key, field in (("vth0", "vth0"), ("kp", "kp"), ("lambda", "lambda_"), ("tox", "tox")):
            value = model.param(key)
            if value is not None:
                overrides[field] = value
        if "tox" in overrides:
            overrides["cox"] = config.EPS_OX / overrides["tox"]
        params = params._replace(**overrides)

    if device.w:
        params = params._replace(w=device.w)
    if device.l:
        params = params._replace(l=device.l)
    return params


def stack_params(params: list[MosParams]) -> MosParams:
    """
    Stack per-instance parameters into one MosParams of arrays.

    mosfet_current is elementwise, so the stacked record evaluates every
    instance at once.
    """
    fields = []
    for name in MosParams._fields:
        dtype = bool if name == "is_pmos" else float
        fields.append(jnp.asarray([getattr(p, name) for p in params], dtype=dtype))
    return MosParams(*fields)


def mosfet_current(vgs, vds, params: MosParams, vbs=0.0) -> MosCurrent:
    """
    Evaluate the Level-1 model at terminal voltages.

    Args:
        vgs: Gate-source voltage
        vds: Drain-source voltage
        params: Resolved parameters, scalars or stacked per instance
        vbs: Body-source voltage (unused)

    Returns:
        MosCurrent in the terminal frame: ids is sign-flipped for PMOS,
        gm and gds are the derivatives with respect to the actual vgs/vds
        and therefore positive for both polarities.
    """
    sign = jnp.where(params.is_pmos, -1.0, 1.0)
    Vgs = sign * jnp.asarray(vgs)
    Vds = sign * jnp.asarray(vds)
    beta = params.beta
    lam = params.lambda_
    vth = jnp.abs(params.vth0)

    vov = Vgs - vth
    clm = 1.0 + lam * Vds

    ids_triode = beta * (vov * Vds - 0.5 * Vds * Vds) * clm
    gm_triode = beta * Vds * clm
    gds_triode = beta * (vov - Vds) * clm + beta * (vov * Vds - 0.5 * Vds * Vds) * lam

    ids_sat = 0.5 * beta * vov * vov * clm
    gm_sat = beta * vov * clm
    gds_sat = 0.5 * beta * vov * vov * lam

    cutoff = Vgs <= vth
    triode = Vds < vov

    ids = jnp.where(cutoff, 0.0, jnp.where(triode, ids_triode, ids_sat))
    gm = jnp.where(cutoff, 0.0, jnp.where(triode, gm_triode, gm_sat))
    gds = jnp.where(cutoff, 0.0, jnp.abs(jnp.where(triode, gds_triode, gds_sat))) + config.GDS_MIN

    return MosCurrent(ids=sign * ids, gm=gm, gds=gds, gmb=jnp.zeros_like(ids))


def operating_region(vgs: float, vds: float, params: MosParams) -> str:
    """Region name ("cutoff", "triode", "saturation") for diagnostics."""
    sign = -1.0 if params.is_pmos else 1.0
    Vgs, Vds = sign * vgs, sign * vds
    vov = Vgs - abs(params.vth0)
    if vov <= 0:
        return "cutoff"
    if Vds < vov:
        return "triode"
    return "saturation"
