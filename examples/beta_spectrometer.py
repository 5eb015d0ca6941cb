"""
Beta spectrometer prototype.

Electrons leave (-1, 4) cm with Gaussian momentum around 1 MeV/c in random
directions. Two collimator pairs select a quarter-circle path through the
field and a detector behind the second pair records what gets through.

Run:
  python examples/beta_spectrometer.py [field.npz]

Without an argument a uniform 83.3 mT map over [-3, 6]² cm is used, which
bends 1 MeV/c on a 4 cm radius around (3, 3) cm.
"""
import logging
import sys

import numpy as np
from beam_sim import (
    COLLIMATOR,
    DETECTOR,
    AbsorberRegion,
    EnsembleDriver,
    FieldGrid,
    GaussianMomentumSource,
    SimulationConfig,
    TrajectorySimulator,
)
from beam_sim.analysis import EnergyRecorder, compare_histograms, energy_histogram, fit_gaussian
from beam_sim.constants import TESLA, unit
from beam_sim.io import load_field_grid, save_outcomes
from beam_sim.renderer import BufferedRenderer

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

cm = unit.c
momentum = 1 * unit.M
N = 500

if len(sys.argv) > 1:
    grid = load_field_grid(sys.argv[1])
else:
    grid = FieldGrid.uniform(momentum / (4 * cm) / (unit.m * TESLA), (-3.0, 6.0), (-3.0, 6.0))

recorder = EnergyRecorder()
cfg = SimulationConfig(
    absorbers=[
        AbsorberRegion.from_native(-2, -1.1, 3, 4, cm, COLLIMATOR, "top collimator left"),
        AbsorberRegion.from_native(-0.9, 0, 3, 4, cm, COLLIMATOR, "top collimator right"),
        AbsorberRegion.from_native(3, 4, -0.9, 0, cm, COLLIMATOR, "side collimator top"),
        AbsorberRegion.from_native(3, 4, -2, -1.1, cm, COLLIMATOR, "side collimator bottom"),
        AbsorberRegion.from_native(4.5, 5, -1.5, -0.5, cm, DETECTOR, "detector", on_hit=recorder),
    ],
)
sim = TrajectorySimulator.from_config(cfg, grid)
source = GaussianMomentumSource((-1 * cm, 4 * cm), momentum, momentum, seed=12345)

outcomes, summary = EnsembleDriver(sim, source, N).run_all()
save_outcomes(outcomes, "beta_outcomes.npz")

# kinetic-energy spectra, all and detected
all_counts, edges = energy_histogram(outcomes, bins=50, range=(0.0, 3 * unit.M), kinetic=True)
detected_counts, _ = energy_histogram(
    outcomes, bins=50, range=(0.0, 3 * unit.M), tag=DETECTOR, kinetic=True
)
scaled = compare_histograms(all_counts, detected_counts)

print(f"detected {summary.detected}/{summary.total} ({100 * summary.detected_fraction:.2f} %)")
if recorder.energies:
    e = np.asarray(recorder.energies)
    print(f"detected energy {e.mean() / unit.M:.3f} +- {e.std() / unit.M:.3f} MeV")
for lo, a, d in zip(edges[:-1], scaled, detected_counts):
    if d:
        print(f"  {lo / unit.M:5.2f} MeV  all(scaled)={a:6.2f}  detected={d}")
if np.count_nonzero(detected_counts) >= 3:
    gauss = fit_gaussian(detected_counts, edges)
    print(f"detected KE fit: mean {gauss.mean / unit.M:.3f} MeV, sigma {gauss.sigma / unit.M:.3f} MeV")

renderer = BufferedRenderer(length_unit=cm)
renderer.render_outcomes(outcomes, sim.absorbers, title="detected tracks", tag=DETECTOR)
print("buffered", len(renderer.pictures[0]["tracks"]), "detected tracks for plotting")
