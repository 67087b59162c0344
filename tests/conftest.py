"""Shared netlist fixtures for the pymna tests."""
import pytest

import pymna  # noqa: F401  (enables 64-bit floats)


@pytest.fixture
def divider():
    """1.8 V source across two 1 kOhm resistors: V(out) = 0.9 V."""
    from pymna.circuit import Netlist, R, V

    net = Netlist("divider")
    net, _ = V(net, "in", "0", name="V1", dc=1.8)
    net, _ = R(net, "in", "out", name="R1", value=1e3)
    net, _ = R(net, "out", "0", name="R2", value=1e3)
    return net


@pytest.fixture
def rc_lowpass():
    """1 kOhm / 1 uF low-pass (RC = 1 ms) driven by a 0 -> 1 V step with AC magnitude 1."""
    from pymna.circuit import Netlist, R, C, V, Pulse

    net = Netlist("rc")
    net, _ = V(net, "in", "0", name="V1", dc=0.0, ac_mag=1.0, transient=Pulse(0.0, 1.0, width=1.0))
    net, _ = R(net, "in", "out", name="R1", value=1e3)
    net, _ = C(net, "out", "0", name="C1", value=1e-6)
    return net


@pytest.fixture
def rl_circuit():
    """1 V step into 1 kOhm in series with 1 H (L/R = 1 ms)."""
    from pymna.circuit import Netlist, R, L, V, Pulse

    net = Netlist("rl")
    net, _ = V(net, "in", "0", name="V1", dc=0.0, transient=Pulse(0.0, 1.0, width=1.0))
    net, _ = R(net, "in", "mid", name="R1", value=1e3)
    net, _ = L(net, "mid", "0", name="L1", value=1.0)
    return net


@pytest.fixture
def nmos_amp():
    """Common-source NMOS stage: 2 kOhm drain load from 1.8 V, gate at 1.0 V."""
    from pymna.circuit import Netlist, R, V, M, MosModel

    net = Netlist("cs")
    net = net.add_model(MosModel("nch", "nmos"))
    net, _ = V(net, "vdd", "0", name="VDD", dc=1.8)
    net, _ = V(net, "g", "0", name="VG", dc=1.0)
    net, _ = R(net, "vdd", "d", name="RD", value=2e3)
    net, _ = M(net, "d", "g", "0", "0", name="M1", model="nch")
    return net
