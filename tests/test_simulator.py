import logging

import numpy as np
import pytest
from beam_sim.absorbers import AbsorberRegion, AbsorberSet
from beam_sim.analysis import EnergyRecorder
from beam_sim.config import DEFAULT_EDGE_MARGIN, SimulationConfig
from beam_sim.constants import ELECTRON_MASS
from beam_sim.errors import InvalidConfiguration, NonTerminatingSimulation
from beam_sim.field import FieldGrid, FieldSampler
from beam_sim.profiler import Profiler
from beam_sim.simulator import TrajectorySimulator
from beam_sim.types import COLLIMATOR, DETECTOR, ParticleState, Termination


def _zero_field(half=4.0):
    return FieldSampler(FieldGrid.uniform(0.0, (-half, half), (-half, half)))


def test_time_limit_beats_geometry():
    """Elapsed τ over the limit wins even when the particle is off the map."""
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0)
    state = ParticleState.from_mass((100.0, 0.0), (0.0, 0.0), ELECTRON_MASS)
    state.step_index = 11
    assert sim.check_termination(state) == (int(Termination.TIME_LIMIT), None)


def test_boundary_beats_absorber():
    absorbers = [AbsorberRegion(3.0, 5.0, -1.0, 1.0, tag=DETECTOR)]
    sim = TrajectorySimulator(_zero_field(), absorbers, dtau=0.1, tau_final=1.0, edge_margin=0.5)
    state = ParticleState.from_mass((3.6, 0.0), (0.0, 0.0), ELECTRON_MASS)
    assert sim.check_termination(state) == (int(Termination.BOUNDARY_ESCAPE), None)
    # inside the absorber but clear of the margin
    state.position[0] = 3.2
    assert sim.check_termination(state) == (DETECTOR, 0)


def test_edge_margin_is_inclusive():
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0, edge_margin=0.5)
    assert sim.escaped(-3.5, 0.0)
    assert sim.escaped(3.5, 0.0)
    assert sim.escaped(0.0, -3.5)
    assert sim.escaped(0.0, 10.0)
    assert not sim.escaped(-3.5 + 1e-9, 0.0)
    assert not sim.escaped(0.0, 0.0)


def test_runs_until_time_limit():
    """
    τ_final = 1.0 with dτ = 0.1: the check 10·0.1 > 1.0 is false, so the
    particle takes an 11th step and stops before the 12th.
    """
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0)
    state = ParticleState.from_mass((0.0, 0.0), (0.0, 0.0), ELECTRON_MASS)
    outcome = sim.run(state)
    assert outcome.tag == Termination.TIME_LIMIT
    assert outcome.reason is Termination.TIME_LIMIT
    assert outcome.absorber_index is None
    assert outcome.steps == 11
    assert len(outcome.trajectory) == 12
    assert outcome.tau == pytest.approx(1.1)
    assert outcome.final_energy == pytest.approx(ELECTRON_MASS)


def test_initial_state_can_terminate_immediately():
    absorbers = [AbsorberRegion(-1.0, 1.0, -1.0, 1.0, tag=COLLIMATOR)]
    sim = TrajectorySimulator(_zero_field(), absorbers, dtau=0.1, tau_final=1.0)
    outcome = sim.run(ParticleState.from_mass((0.0, 0.0), (1e6, 0.0), ELECTRON_MASS))
    assert outcome.tag == COLLIMATOR
    assert outcome.steps == 0
    assert list(outcome.trajectory) == [(0.0, 0.0)]


def test_detector_hit_calls_hook_once():
    recorder = EnergyRecorder()
    detector = AbsorberRegion(2.0, 3.0, -1.0, 1.0, tag=DETECTOR, name="detector", on_hit=recorder)
    sim = TrajectorySimulator(_zero_field(10.0), [detector], dtau=0.1, tau_final=100.0)
    # p = m: one unit of length per unit of proper time
    m = ELECTRON_MASS
    state = ParticleState.from_mass((0.0, 0.0), (m, 0.0), m)

    outcome = sim.run(state)

    assert outcome.tag == DETECTOR
    assert outcome.detected
    assert outcome.reason is Termination.ABSORBED
    assert outcome.absorber_index == 0
    assert 2.0 <= outcome.final_position[0] <= 2.1 + 1e-9
    assert outcome.steps in (20, 21)
    assert recorder.energies == [pytest.approx(2 ** 0.5 * m)]
    assert outcome.final_energy == recorder.energies[0]


def test_escape_through_edge():
    sim = TrajectorySimulator(_zero_field(), dtau=0.05, tau_final=100.0, edge_margin=0.1)
    m = ELECTRON_MASS
    outcome = sim.run(ParticleState.from_mass((0.0, 0.0), (0.0, -m), m))
    assert outcome.tag == Termination.BOUNDARY_ESCAPE
    assert outcome.reason is Termination.BOUNDARY_ESCAPE
    assert outcome.absorber_index is None
    assert outcome.final_position[1] <= -3.9


def test_escape_without_margin():
    """RK4 stages that would sample past the map edge end the run as an escape."""
    field = FieldSampler(FieldGrid.uniform(0.0, (-1, 1), (-1, 1)))
    sim = TrajectorySimulator(field, dtau=0.01, tau_final=10.0, edge_margin=0.0)
    m = ELECTRON_MASS
    outcome = sim.run(ParticleState.from_mass((0.0, 0.0), (m, 0.0), m))
    assert outcome.tag == Termination.BOUNDARY_ESCAPE
    assert outcome.reason is Termination.BOUNDARY_ESCAPE
    assert outcome.absorber_index is None
    assert 0.98 <= outcome.final_position[0] <= 1.0 + 1e-9
    assert outcome.final_kinetic_energy == pytest.approx((2 ** 0.5 - 1) * m)


def test_step_off_the_map_leaves_state_untouched():
    field = FieldSampler(FieldGrid.uniform(0.0, (-1, 1), (-1, 1)))
    sim = TrajectorySimulator(field, dtau=0.01, tau_final=10.0, edge_margin=0.0)
    m = ELECTRON_MASS
    state = ParticleState.from_mass((0.999, 0.0), (m, 0.0), m)
    before = state.copy()
    assert sim.step(state) is False
    assert np.array_equal(state.position, before.position)
    assert np.array_equal(state.momentum, before.momentum)
    assert state.step_index == 0
    assert state.tau == 0.0


def test_default_margin_matches_config():
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0)
    assert sim.edge_margin == SimulationConfig().edge_margin == DEFAULT_EDGE_MARGIN


def test_iteration_cap_raises():
    sim = TrajectorySimulator(_zero_field(), dtau=1.0, tau_final=1e9, max_steps=50)
    state = ParticleState.from_mass((0.0, 0.0), (0.0, 0.0), ELECTRON_MASS)
    with pytest.raises(NonTerminatingSimulation):
        sim.run(state)
    assert state.step_index == 50


def test_endpoints_only_without_recording():
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0, record_trajectory=False)
    m = ELECTRON_MASS
    outcome = sim.run(ParticleState.from_mass((0.0, 0.0), (0.1 * m, 0.0), m))
    assert outcome.steps == 11
    assert len(outcome.trajectory) == 2
    assert outcome.trajectory[0] == (0.0, 0.0)
    assert outcome.trajectory[1] == outcome.final_position


def test_iter_steps_yields_each_step():
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0)
    state = ParticleState.from_mass((0.0, 0.0), (0.0, 0.0), ELECTRON_MASS)
    indices = [s.step_index for s in sim.iter_steps(state)]
    assert indices == list(range(1, 12))


def test_profiler_sections():
    profiler = Profiler()
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0, profiler=profiler)
    sim.run(ParticleState.from_mass((0.0, 0.0), (0.0, 0.0), ELECTRON_MASS))
    summary = profiler.stats.summary()
    assert summary["integrate"]["n"] == 11
    # one check per step plus the final one
    assert summary["termination"]["n"] == 12


def test_simulator_validates_settings():
    with pytest.raises(InvalidConfiguration):
        TrajectorySimulator(_zero_field(), dtau=0.0, tau_final=1.0)
    with pytest.raises(InvalidConfiguration):
        TrajectorySimulator(_zero_field(), dtau=2.0, tau_final=1.0)
    with pytest.raises(InvalidConfiguration):
        TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0, edge_margin=-1.0)
    sim = TrajectorySimulator(_zero_field(), [AbsorberRegion(0, 1, 0, 1)], dtau=0.1, tau_final=1.0)
    assert isinstance(sim.absorbers, AbsorberSet)


def test_from_config_uses_units():
    cfg = SimulationConfig(
        dtau=0.1,
        tau_final=1.0,
        edge_margin=0.0,
        length_unit=0.01,
        field_unit=5.0,
        absorbers=[AbsorberRegion.from_native(1.0, 2.0, -1.0, 1.0, 0.01, tag=DETECTOR)],
    )
    grid = FieldGrid.uniform(2.0, (-4, 4), (-4, 4))
    sim = TrajectorySimulator.from_config(cfg, grid)
    assert sim.magnetic_field.bounds == pytest.approx((-0.04, 0.04, -0.04, 0.04))
    assert sim.magnetic_field.sample((0.0, 0.0)) == pytest.approx(10.0)
    assert sim.absorbers.test_collision((0.015, 0.0)) == DETECTOR


def test_run_logs_termination(caplog):
    sim = TrajectorySimulator(_zero_field(), dtau=0.1, tau_final=1.0)
    with caplog.at_level(logging.DEBUG, logger="beam_sim.simulator"):
        sim.run(ParticleState.from_mass((0.0, 0.0), (0.0, 0.0), ELECTRON_MASS))
    assert "particle terminated" in caplog.text
