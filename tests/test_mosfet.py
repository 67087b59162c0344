"""
Test: Level-1 MOSFET model.

Validates:
- Region equations (cutoff, triode, saturation)
- gm and gds agree with jax.grad of the drain current
- PMOS sign handling
- Parameter resolution from model cards, name inference and instance W/L
"""
import pytest


def nmos():
    from pymna.engine import default_params
    return default_params(is_pmos=False)


def pmos():
    from pymna.engine import default_params
    return default_params(is_pmos=True)


def test_defaults():
    p = nmos()
    assert p.vth0 == 0.4
    assert p.kp == 120e-6
    assert p.lambda_ == 0.04
    assert p.w == 1e-6
    assert p.l == 0.13e-6
    assert p.beta == pytest.approx(120e-6 / 0.13)

    q = pmos()
    assert q.vth0 == -0.4
    assert q.kp == 60e-6


def test_cutoff():
    from pymna import config
    from pymna.engine import mosfet_current

    op = mosfet_current(0.2, 1.0, nmos())
    assert float(op.ids) == 0.0
    assert float(op.gm) == 0.0
    assert float(op.gds) == pytest.approx(config.GDS_MIN)


def test_saturation_current():
    from pymna.engine import mosfet_current

    p = nmos()
    op = mosfet_current(1.0, 1.0, p)
    expected = 0.5 * p.beta * 0.6 ** 2 * (1 + 0.04 * 1.0)
    assert float(op.ids) == pytest.approx(expected)


def test_triode_current():
    from pymna.engine import mosfet_current

    p = nmos()
    op = mosfet_current(1.5, 0.2, p)
    vov = 1.1
    expected = p.beta * (vov * 0.2 - 0.5 * 0.2 ** 2) * (1 + 0.04 * 0.2)
    assert float(op.ids) == pytest.approx(expected)


@pytest.mark.parametrize("vgs,vds", [
    (1.0, 1.0),    # saturation
    (1.5, 0.2),    # triode
    (0.9, 0.5),    # saturation edge region
])
def test_conductances_match_gradient(vgs, vds):
    import jax
    from pymna.engine import mosfet_current

    p = nmos()
    op = mosfet_current(vgs, vds, p)
    dids_dvgs = jax.grad(lambda v: mosfet_current(v, vds, p).ids)(vgs)
    dids_dvds = jax.grad(lambda v: mosfet_current(vgs, v, p).ids)(vds)

    assert float(op.gm) == pytest.approx(float(dids_dvgs), rel=1e-6)
    assert float(op.gds) == pytest.approx(float(dids_dvds), rel=1e-6)


def test_pmos_conducts_with_negative_bias():
    import jax
    from pymna.engine import mosfet_current

    p = pmos()
    op = mosfet_current(-1.0, -1.0, p)
    assert float(op.ids) < 0.0

    # Terminal-frame slopes are positive for both polarities
    dids_dvgs = jax.grad(lambda v: mosfet_current(v, -1.0, p).ids)(-1.0)
    assert float(op.gm) > 0.0
    assert float(op.gm) == pytest.approx(float(dids_dvgs), rel=1e-6)


def test_pmos_mirrors_nmos():
    from pymna.engine import mosfet_current

    n = nmos()
    p = pmos()._replace(kp=n.kp)
    assert float(mosfet_current(-1.0, -1.0, p).ids) == pytest.approx(-float(mosfet_current(1.0, 1.0, n).ids))


def test_body_voltage_ignored():
    from pymna.engine import mosfet_current

    p = nmos()
    assert float(mosfet_current(1.0, 1.0, p, vbs=-1.0).ids) == float(mosfet_current(1.0, 1.0, p).ids)


def test_operating_region():
    from pymna.engine import operating_region

    assert operating_region(0.2, 1.0, nmos()) == "cutoff"
    assert operating_region(1.5, 0.2, nmos()) == "triode"
    assert operating_region(1.0, 1.0, nmos()) == "saturation"
    assert operating_region(-1.0, -1.0, pmos()) == "saturation"


class TestResolveParams:
    def test_model_card_overrides(self):
        from pymna import config
        from pymna.circuit import Netlist, M, MosModel
        from pymna.engine import resolve_params

        net = Netlist().add_model(MosModel("NCH", "nmos", (("vth0", 0.5), ("tox", 5e-9), ("lambda", 0.1))))
        net, m1 = M(net, "d", "g", "0", "0", name="M1", model="nch", w=2e-6, l=1e-6)

        p = resolve_params(m1, net)
        assert p.vth0 == 0.5
        assert p.kp == 120e-6
        assert p.lambda_ == 0.1
        assert p.cox == pytest.approx(config.EPS_OX / 5e-9)
        assert p.w == 2e-6
        assert p.l == 1e-6
        assert not p.is_pmos

    def test_model_polarity(self):
        from pymna.circuit import Netlist, M, MosModel
        from pymna.engine import resolve_params

        net = Netlist().add_model(MosModel("p1", "pmos"))
        net, m1 = M(net, "d", "g", "s", "s", name="M1", model="P1")

        p = resolve_params(m1, net)
        assert p.is_pmos
        assert p.vth0 == -0.4

    def test_missing_model_infers_polarity_from_name(self):
        from pymna.circuit import Netlist, M
        from pymna.engine import resolve_params

        net, mp = M(Netlist(), "d", "g", "s", "s", name="M1", model="pfet_lvt")
        net, mn = M(net, "d", "g", "0", "0", name="M2", model="whatever")

        assert resolve_params(mp, net).is_pmos
        assert not resolve_params(mn, net).is_pmos
