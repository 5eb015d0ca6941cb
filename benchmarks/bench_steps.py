"""
Microbenchmark: RK4 steps per second vs field-map resolution.
Run:
  python benchmarks/bench_steps.py
"""
import time

from beam_sim import AbsorberRegion, GaussianMomentumSource, EnsembleDriver, TrajectorySimulator
from beam_sim import FieldGrid, FieldSampler
from beam_sim.constants import ELECTRON_MASS, unit
from beam_sim.profiler import Profiler


def run(nodes: int, particles: int = 20):
    prof = Profiler()
    grid = FieldGrid.from_function(
        lambda X, Y: 1e5 * (1.0 + 0.1 * X * Y), (-5.0, 5.0), (-5.0, 5.0), (nodes, nodes)
    )
    sim = TrajectorySimulator(
        FieldSampler(grid),
        [AbsorberRegion(3.0, 4.0, -1.0, 1.0)],
        dtau=1e-3,
        tau_final=2.0,
        edge_margin=0.05,
        record_trajectory=False,
        profiler=prof,
    )
    # seeded (determinism)
    source = GaussianMomentumSource((0.0, 0.0), 1 * unit.M, 0.1 * unit.M, ELECTRON_MASS, seed=12345)

    t0 = time.perf_counter()
    outcomes, _ = EnsembleDriver(sim, source, particles).run_all()
    t1 = time.perf_counter()

    steps = sum(o.steps for o in outcomes)
    return steps / (t1 - t0), prof.stats.summary()


if __name__ == "__main__":
    for n in [11, 101, 1001]:
        rate, summary = run(n)
        print(f"nodes={n:5d}^2  steps/s={rate:10.1f}")
        for k in ["termination", "integrate"]:
            if k in summary:
                print(" ", k, summary[k])
        print()
