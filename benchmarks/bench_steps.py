"""
Microbenchmark: time per tick vs chain length and vs substep count.
Run:
  python benchmarks/bench_steps.py
"""
import time

from xpbd_sim.builders import build_chain
from xpbd_sim.core import simulate_iteration
from xpbd_sim.profiler import Profiler

DT = 1 / 60


def run(links: int, substeps: int, ticks: int = 20):
    prof = Profiler()
    # Stacked straight up from the anchor, as in the regression test
    store, constraints = build_chain(links, spacing=1.0, direction=(0.0, 1.0, 0.0))

    # warmup
    simulate_iteration(DT, substeps, store, constraints)

    t0 = time.perf_counter()
    for _ in range(ticks):
        simulate_iteration(DT, substeps, store, constraints, profiler=prof)
    t1 = time.perf_counter()

    per_tick = (t1 - t0) / ticks
    return per_tick, prof.stats.summary()


if __name__ == "__main__":
    print("constraints (40 substeps)")
    for links in range(50, 401, 50):
        per_tick, summary = run(links, 40)
        print(f"  links={links:4d}  tick={1e3*per_tick:8.3f} ms")
        for k in ["predict", "project", "reconcile"]:
            if k in summary:
                print("   ", k, f"total={summary[k]['total_ms']:.3f} ms")

    print("substeps (100 links)")
    for substeps in range(50, 301, 50):
        per_tick, _ = run(100, substeps)
        print(f"  substeps={substeps:4d}  tick={1e3*per_tick:8.3f} ms")
