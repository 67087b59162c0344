"""
Example: NMOS Common-Source Stage

A Level-1 NMOS with a resistive drain load:
- DC sweep of the gate voltage gives the transfer curve V(d) vs V(g)
- AC analysis at the bias point gives the small-signal gain
  A_v = -gm * (R_D || 1/gds)

Components used: V, R, M (with a model card)
"""
from pymna.circuit import Netlist, R, V, M, MosModel, DcAnalysis, AcAnalysis
from pymna.analysis import run_simulation


def build_stage(R_D=2e3, V_DD=1.8, V_G=1.0):
    net = Netlist("common source")
    net = net.add_model(MosModel("nch", "nmos", (("vth0", 0.4), ("kp", 120e-6))))
    net, _ = V(net, "vdd", "0", name="VDD", dc=V_DD)
    net, _ = V(net, "g", "0", name="VG", dc=V_G, ac_mag=1.0)
    net, _ = R(net, "vdd", "d", name="RD", value=R_D)
    net, _ = M(net, "d", "g", "0", "0", name="M1", model="nch", w=2e-6, l=0.5e-6)
    return net


def main():
    net = build_stage()

    print("=" * 60)
    print("NMOS Common-Source Stage")
    print("=" * 60)

    print("\n1. Transfer Curve")
    print("-" * 40)
    sweep = run_simulation(net, DcAnalysis("VG", 0.0, 1.8, 0.1))
    vd = sweep.waveform.signal("V(d)")
    for vg, v in zip(vd.xs, vd.values):
        print(f"   V(g) = {vg:4.2f} V  ->  V(d) = {v:.4f} V")
    print(f"   Converged: {sweep.converged}, {sweep.iterations} NR iterations")

    print("\n2. Small-Signal Gain")
    print("-" * 40)
    ac = run_simulation(net, AcAnalysis("dec", 1, 1.0, 1e3))
    gain_db = ac.waveform.signal("VDB(d)").values[0]
    print(f"   Bias point: V(d) = {ac.op_point['V(d)']:.4f} V")
    print(f"   Gain: {gain_db:.2f} dB ({10 ** (gain_db / 20):.2f} V/V)")
    print(f"   Phase: {ac.waveform.signal('VP(d)').values[0]:.1f} deg")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
