"""
Electron orbit through a square field region.

Native grid [-4, 4]² in centimetres with field 1 inside [-1, 1]² and zero
outside. The field unit is chosen so a 1 MeV/c electron bends on a 3 cm
radius. Starting at (-2, 0) cm moving along +x it drifts straight to the
square, enters at (-1, 0) and curves towards +y around (-1, 3).
"""
import numpy as np
import pytest
from beam_sim.analysis import expected_radius_gev, field_for_radius, fit_circle, tesla
from beam_sim.config import SimulationConfig
from beam_sim.constants import SECOND, unit
from beam_sim.field import square_field
from beam_sim.simulator import TrajectorySimulator
from beam_sim.types import Termination

P = 1 * unit.M
R_NATIVE = 3.0
CENTER = (-1.0, 3.0)


@pytest.fixture(scope="module")
def orbit():
    cm = unit.c
    cfg = SimulationConfig(
        dtau=0.0001 * unit.n * SECOND,
        tau_final=0.02,
        edge_margin=0.005,
        length_unit=cm,
        field_unit=field_for_radius(P, R_NATIVE * cm),
    )
    grid = square_field(1.0, half_width=1.0, padding=3.0, spacing=0.01)
    sim = TrajectorySimulator.from_config(cfg, grid)
    state = cfg.particle((-2 * cm, 0.0), (P, 0.0))
    return cfg, sim.run(state)


def test_orbit_runs_to_time_limit(orbit):
    cfg, outcome = orbit
    assert outcome.tag == Termination.TIME_LIMIT
    assert outcome.steps == 667
    assert len(outcome.trajectory) == 668
    assert outcome.final_energy == pytest.approx(np.hypot(P, cfg.rest_mass))


def test_points_on_the_arc_lie_on_the_circle(orbit):
    cfg, outcome = orbit
    native = outcome.trajectory.to_native(cfg.length_unit)
    for k in (200, 500):
        x, y = native[k]
        r = np.hypot(x - CENTER[0], y - CENTER[1])
        assert r == pytest.approx(R_NATIVE, abs=0.02)


def test_drift_before_the_square_is_straight(orbit):
    cfg, outcome = orbit
    native = outcome.trajectory.to_native(cfg.length_unit)
    assert native[0] == pytest.approx((-2.0, 0.0))
    assert native[100][1] == pytest.approx(0.0, abs=1e-12)
    assert native[100][0] > -2.0


def test_circle_fit_recovers_radius_and_centre(orbit):
    cfg, outcome = orbit
    native = outcome.trajectory.to_native(cfg.length_unit)
    fit = fit_circle(native[200:501])
    assert fit.radius == pytest.approx(R_NATIVE, abs=0.02)
    assert fit.x_center == pytest.approx(CENTER[0], abs=0.02)
    assert fit.y_center == pytest.approx(CENTER[1], abs=0.02)
    assert fit.rms < 1e-3


def test_rule_of_thumb_radius(orbit):
    cfg, _ = orbit
    assert expected_radius_gev(P, tesla(cfg.field_unit)) == pytest.approx(R_NATIVE * unit.c)
