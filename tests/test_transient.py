"""
Test: transient analysis (Backward Euler).

RC step response: V(t) = V0 * (1 - exp(-t / RC))
RL step response: I(t) = V0 / R * (1 - exp(-t R / L))

Backward Euler with h <= RC / 50 stays within a few percent of the
exact response.
"""
import math
import threading
import pytest


def sample_near(signal, t):
    return min(signal.samples, key=lambda s: abs(s.x - t))


def test_rc_step_response(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    tau = 1e-3
    result = run_transient(rc_lowpass, TranAnalysis(tau / 100, 5 * tau))
    out = result.waveform.signal("V(out)")

    assert result.converged
    assert result.waveform.x_unit == "s"
    assert out.samples[0].x == 0.0
    assert out.samples[0].value == pytest.approx(0.0, abs=1e-9)

    at_tau = sample_near(out, tau)
    assert at_tau.x == pytest.approx(tau)
    assert at_tau.value == pytest.approx(1 - math.exp(-1), rel=0.05)

    final = out.samples[-1]
    assert final.x == pytest.approx(5 * tau)
    assert final.value == pytest.approx(1 - math.exp(-5), rel=0.01)


def test_rc_settles(rc_lowpass):
    """Long after the step the capacitor sits at the source voltage."""
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    result = run_transient(rc_lowpass, TranAnalysis(2e-4, 2e-2))
    assert result.waveform.signal("V(out)").values[-1] == pytest.approx(1.0, rel=0.01)


def test_rl_step_response(rl_circuit):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    tau = 1e-3
    result = run_transient(rl_circuit, TranAnalysis(tau / 100, 3 * tau))
    current = result.waveform.signal("I(L1)")

    assert result.converged
    assert current.unit == "A"
    assert sample_near(current, tau).value == pytest.approx(1e-3 * (1 - math.exp(-1)), rel=0.05)


def test_sources_follow_waveform():
    from pymna.circuit import Netlist, V, R, Sin, TranAnalysis
    from pymna.analysis import run_transient

    net = Netlist()
    net, _ = V(net, "in", "0", name="V1", transient=Sin(0.0, 1.0, 1e3))
    net, _ = R(net, "in", "0", name="R1", value=1e3)

    result = run_transient(net, TranAnalysis(1e-5, 1e-3))
    for sample in result.waveform.signal("V(in)").samples[1:]:
        assert sample.value == pytest.approx(math.sin(2 * math.pi * 1e3 * sample.x), abs=1e-6)


def test_uic_uses_initial_conditions():
    """RC discharge from ic = 1 V without an operating point."""
    from pymna.circuit import Netlist, R, C, TranAnalysis
    from pymna.analysis import run_transient

    net = Netlist()
    net, _ = R(net, "n", "0", name="R1", value=1e3)
    net, _ = C(net, "n", "0", name="C1", value=1e-6, ic=1.0)

    tau = 1e-3
    result = run_transient(net, TranAnalysis(tau / 100, 2 * tau, uic=True))
    out = result.waveform.signal("V(n)")

    assert any("UIC" in line for line in result.log)
    assert sample_near(out, tau).value == pytest.approx(math.exp(-1), rel=0.05)


def test_max_step_limits_step(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    result = run_transient(rc_lowpass, TranAnalysis(1e-4, 1e-3, max_step=5e-5))
    assert len(result.waveform.signal("V(out)").samples) == 21


def test_start_time(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    result = run_transient(rc_lowpass, TranAnalysis(1e-4, 2e-3, start=1e-3))
    out = result.waveform.signal("V(out)")

    assert result.waveform.x_range == (1e-3, 2e-3)
    assert out.xs[0] == pytest.approx(1e-3)
    assert out.xs[-1] == pytest.approx(2e-3)


def test_downsampling_keeps_final_point(rc_lowpass):
    from pymna import config
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    h = 1e-6
    steps = 2 * config.MAX_WAVEFORM_POINTS + 1  # stride 2, odd final step
    result = run_transient(rc_lowpass, TranAnalysis(h, steps * h))
    out = result.waveform.signal("V(out)")

    # initial point, every second step, and the final step
    assert len(out.samples) == 1 + config.MAX_WAVEFORM_POINTS + 1
    assert out.xs[-1] == pytest.approx(steps * h)


def test_iterations_and_log(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    result = run_transient(rc_lowpass, TranAnalysis(1e-4, 1e-3))

    assert result.iterations >= 10
    assert any(line.startswith("Completed 10 time steps") for line in result.log)
    assert "All steps converged" in result.log


def test_progress(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    calls = []
    run_transient(rc_lowpass, TranAnalysis(1e-5, 5e-3), progress=calls.append)

    assert calls[:5] == pytest.approx([0.2, 0.4, 0.6, 0.8, 1.0])
    assert calls[-1] == 1.0


class CancelAfter:
    """Cancel token that trips after n checks."""

    def __init__(self, n):
        self.n = n

    def is_set(self):
        self.n -= 1
        return self.n < 0


def test_cancel_returns_partial_result(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    result = run_transient(rc_lowpass, TranAnalysis(1e-5, 5e-3), cancel=CancelAfter(10))
    out = result.waveform.signal("V(out)")

    assert result.cancelled
    # initial point plus the 10 completed steps
    assert len(out.samples) == 11
    assert out.xs[-1] == pytest.approx(1e-4)


def test_cancel_with_event(rc_lowpass):
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    cancel = threading.Event()
    cancel.set()
    result = run_transient(rc_lowpass, TranAnalysis(1e-5, 5e-3), cancel=cancel)

    assert result.cancelled
    assert len(result.waveform.signal("V(out)").samples) == 1


def test_long_run_stays_fast(rc_lowpass):
    """Assembly is one compiled call per Newton iteration, so 5000 steps take seconds."""
    import time
    from pymna.circuit import TranAnalysis
    from pymna.analysis import run_transient

    h = 1e-6
    t0 = time.perf_counter()
    result = run_transient(rc_lowpass, TranAnalysis(h, 5000 * h))
    elapsed = time.perf_counter() - t0

    assert result.converged
    assert result.waveform.signal("V(out)").values[-1] == pytest.approx(1 - math.exp(-5), abs=0.02)
    assert elapsed < 30.0
