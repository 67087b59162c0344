"""
Example: RC Low-Pass Filter

Demonstrates first-order RC low-pass behavior with the transient and AC
analyses:
- Cutoff frequency: f_c = 1 / (2 * pi * R * C)
- At f_c: output is -3dB (0.707x) and phase is -45 degrees
- Time constant: tau = R * C

Components used: R, C, V (pulse step + AC magnitude)
"""
import math

from pymna.circuit import Netlist, R, C, V, Pulse, TranAnalysis, AcAnalysis
from pymna.analysis import run_simulation


def build_lowpass_filter(R_val=1000.0, C_val=1e-6, V_step=5.0):
    """Build RC low-pass filter.

    Circuit:
        Vin ---[R]---+--- Vout
                     |
                    [C]
                     |
                    GND
    """
    net = Netlist("rc lowpass")
    net, _ = V(net, "in", "0", name="Vin", dc=0.0, ac_mag=1.0,
               transient=Pulse(0.0, V_step, width=1.0))
    net, _ = R(net, "in", "out", name="R1", value=R_val)
    net, _ = C(net, "out", "0", name="C1", value=C_val)
    return net


def plot_results(step, ac, filename="lowpass_rc.png"):
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(3, 1, figsize=(10, 10))
    out = step.waveform.signal("V(out)")
    axes[0].plot([t * 1e3 for t in out.xs], out.values)
    axes[0].set_xlabel("Time (ms)")
    axes[0].set_ylabel("V(out) (V)")
    axes[0].grid(True)

    mag = ac.waveform.signal("VDB(out)")
    phase = ac.waveform.signal("VP(out)")
    axes[1].semilogx(mag.xs, mag.values)
    axes[1].set_ylabel("Magnitude (dB)")
    axes[1].grid(True, which="both")
    axes[2].semilogx(phase.xs, phase.values)
    axes[2].set_xlabel("Frequency (Hz)")
    axes[2].set_ylabel("Phase (deg)")
    axes[2].grid(True, which="both")

    plt.tight_layout()
    plt.savefig(filename, dpi=150)
    print(f"   Saved plot to {filename}")
    plt.close()


def main():
    R_val, C_val = 1000.0, 1e-6
    tau = R_val * C_val
    f_c = 1 / (2 * math.pi * tau)

    print("=" * 60)
    print("RC Low-Pass Filter")
    print("=" * 60)
    print(f"   tau = {tau * 1e3:.2f} ms, f_c = {f_c:.1f} Hz")

    net = build_lowpass_filter(R_val, C_val)

    print("\n1. Step Response")
    print("-" * 40)
    step = run_simulation(net, TranAnalysis(tau / 100, 5 * tau))
    out = step.waveform.signal("V(out)")
    for n_tau in [1, 2, 3, 5]:
        sample = min(out.samples, key=lambda s: abs(s.x - n_tau * tau))
        expected = 5.0 * (1 - math.exp(-n_tau))
        print(f"   At t={n_tau}*tau: V_out = {sample.value:.4f} V (expected: {expected:.4f} V)")

    print("\n2. Frequency Response")
    print("-" * 40)
    ac = run_simulation(net, AcAnalysis("dec", 5, f_c / 100, f_c * 100))
    mag = ac.waveform.signal("VDB(out)")
    phase = ac.waveform.signal("VP(out)")
    print(f"   {'Freq':>10s}  {'dB':>8s}  {'Phase':>8s}  {'Expected dB':>12s}")
    for f, db, deg in zip(mag.xs, mag.values, phase.values):
        expected_db = -10 * math.log10(1 + (f / f_c) ** 2)
        print(f"   {f:>10.1f}  {db:>8.2f}  {deg:>8.1f}  {expected_db:>12.2f}")

    try:
        plot_results(step, ac)
    except ImportError:
        print("\n   (install matplotlib to plot: pip install pymna[examples])")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
