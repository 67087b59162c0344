"""
Test: AC small-signal analysis.

RC low-pass: H(jw) = 1 / (1 + j w R C), corner fc = 1 / (2 pi R C)
|H(fc)| = -3.01 dB, phase(fc) = -45 degrees.
"""
import math
import pytest


def test_frequency_grids():
    from pymna.analysis import frequency_points

    dec = frequency_points("dec", 10, 1.0, 1e5)
    assert len(dec) == 51
    assert dec[0] == 1.0
    assert dec[-1] == pytest.approx(1e5)

    oct_ = frequency_points("oct", 3, 100.0, 800.0)
    assert len(oct_) == 10
    assert oct_[-1] == pytest.approx(800.0)

    lin = frequency_points("lin", 4, 0.0, 100.0)
    assert lin == pytest.approx([0.0, 25.0, 50.0, 75.0, 100.0])


def test_rc_corner(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    fc = 1 / (2 * math.pi * 1e3 * 1e-6)
    result = run_ac(rc_lowpass, AcAnalysis("lin", 1, fc, 2 * fc))

    mag = result.waveform.signal("VDB(out)")
    phase = result.waveform.signal("VP(out)")
    assert result.waveform.x_unit == "Hz"
    assert mag.unit == "dB"
    assert phase.unit == "deg"
    assert mag.values[0] == pytest.approx(-3.0103, abs=0.5)
    assert phase.values[0] == pytest.approx(-45.0, abs=0.5)


def test_rc_matches_transfer_function(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    result = run_ac(rc_lowpass, AcAnalysis("dec", 5, 1.0, 1e5))
    mag = result.waveform.signal("VDB(out)")
    phase = result.waveform.signal("VP(out)")

    rc = 1e-3
    for f, db, deg in zip(mag.xs, mag.values, phase.values):
        h = 1 / complex(1.0, 2 * math.pi * f * rc)
        assert db == pytest.approx(20 * math.log10(abs(h)), abs=1e-6)
        assert deg == pytest.approx(math.degrees(math.atan2(h.imag, h.real)), abs=1e-6)


def test_input_node_is_flat(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    result = run_ac(rc_lowpass, AcAnalysis("dec", 2, 10.0, 1e4))
    for db in result.waveform.signal("VDB(in)").values:
        assert db == pytest.approx(0.0, abs=1e-9)


def test_signal_order(rc_lowpass):
    """All magnitudes first, then all phases."""
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    result = run_ac(rc_lowpass, AcAnalysis("lin", 2, 10.0, 20.0))
    assert result.waveform.names == ["VDB(in)", "VDB(out)", "VP(in)", "VP(out)"]


def test_inductor_high_pass():
    """Series R, shunt L: |V(out)| = wL / sqrt(R^2 + (wL)^2)."""
    from pymna.circuit import Netlist, V, R, L, AcAnalysis
    from pymna.analysis import run_ac

    net = Netlist()
    net, _ = V(net, "in", "0", name="V1", ac_mag=1.0)
    net, _ = R(net, "in", "out", name="R1", value=1e3)
    net, _ = L(net, "out", "0", name="L1", value=1.0)

    fc = 1e3 / (2 * math.pi)
    result = run_ac(net, AcAnalysis("lin", 1, fc, 2 * fc))
    mag = result.waveform.signal("VDB(out)")
    phase = result.waveform.signal("VP(out)")

    assert mag.values[0] == pytest.approx(-3.0103, abs=0.01)
    assert phase.values[0] == pytest.approx(45.0, abs=0.01)


def test_no_ac_source_reports_floor(divider):
    from pymna import config
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    result = run_ac(divider, AcAnalysis("dec", 1, 1.0, 10.0))

    assert all(v == config.AC_DB_FLOOR for v in result.waveform.signal("VDB(out)").values)
    assert any("No AC sources" in line for line in result.log)


def test_ac_phase_on_source(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    vin = rc_lowpass.devices[0]._replace(ac_mag=2.0, ac_phase=30.0)
    net = rc_lowpass.replace_device(0, vin)
    result = run_ac(net, AcAnalysis("lin", 1, 1.0, 2.0))

    assert result.waveform.signal("VDB(in)").values[0] == pytest.approx(20 * math.log10(2.0))
    assert result.waveform.signal("VP(in)").values[0] == pytest.approx(30.0)


def test_nmos_gain(nmos_amp):
    """Low-frequency gain of the common-source stage is -gm * (RD || 1/gds)."""
    from pymna.circuit import AcAnalysis
    from pymna.engine import mosfet_current, default_params
    from pymna.analysis import run_ac

    vg = nmos_amp.devices[1]._replace(ac_mag=1.0)
    net = nmos_amp.replace_device(1, vg)
    result = run_ac(net, AcAnalysis("lin", 1, 1.0, 2.0))

    vd = result.op_point["V(d)"]
    op = mosfet_current(1.0, vd, default_params(False))
    gain = float(op.gm) / (1 / 2e3 + float(op.gds))

    assert result.converged
    assert result.waveform.signal("VDB(d)").values[0] == pytest.approx(20 * math.log10(gain), abs=0.01)
    assert abs(result.waveform.signal("VP(d)").values[0]) == pytest.approx(180.0, abs=0.01)


def test_variation_is_case_insensitive(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    upper = run_ac(rc_lowpass, AcAnalysis("DEC", 5, 1.0, 1e3))
    lower = run_ac(rc_lowpass, AcAnalysis("dec", 5, 1.0, 1e3))

    assert upper.waveform.signal("VDB(out)").xs == pytest.approx(lower.waveform.signal("VDB(out)").xs)
    assert len(upper.waveform.signal("VDB(out)").samples) == 16


def test_unknown_variation_falls_back_to_linear(rc_lowpass):
    from pymna.circuit import AcAnalysis
    from pymna.analysis import run_ac

    analysis = AcAnalysis("foo", 2, 10.0, 20.0)
    analysis.validate()
    assert analysis.sweep == "lin"

    result = run_ac(rc_lowpass, analysis)

    assert result.converged
    assert result.waveform.signal("VDB(out)").xs == pytest.approx([10.0, 15.0, 20.0])
    assert any("Unknown AC variation 'foo'" in line for line in result.log)
