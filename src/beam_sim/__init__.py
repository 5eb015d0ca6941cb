# MIT License (see LICENSE)
"""
beam_sim - RK4 tracking of charged particles through 2D magnetic field maps.

This package integrates the Lorentz force on a relativistic particle in
proper time with a fixed-step classical Runge-Kutta scheme and classifies
how each trajectory ends: time limit, escape through the field-map edge, or
contact with a rectangular absorber (collimator, detector).

Main entry points:
    - FieldGrid, FieldSampler: Field map and its bilinear world-space sampler.
    - AbsorberRegion, AbsorberSet: Tagged rectangles, first match wins.
    - ParticleState: Position/momentum four-vectors, charge and rest mass.
    - TrajectorySimulator: Runs one particle to termination.
    - EnsembleDriver: Runs many particles from an initial-condition source.
    - SimulationConfig: Configuration surface for a run.

Submodules:
    - core: Lorentz force, RK4 integrator, invariants.
    - analysis: Energy spectra, circle fit, outcome tables.
    - io: Setup JSON, field-map and outcome archives.
    - renderer: Optional visualization adapters.

Example:
    from beam_sim import FieldGrid, FieldSampler, ParticleState, TrajectorySimulator

    field = FieldSampler(FieldGrid.uniform(1e5, (-5, 5), (-5, 5)))
    sim = TrajectorySimulator(field, dtau=1e-3, tau_final=10.0, edge_margin=0.01)
    outcome = sim.run(ParticleState.from_mass((0, 0), (1e6, 0), mass=511e3, charge=-1))
"""
from .absorbers import AbsorberRegion, AbsorberSet
from .config import SimulationConfig
from .ensemble import EnsembleDriver, EnsembleSummary, GaussianMomentumSource
from .errors import (
    BeamSimError,
    InvalidConfiguration,
    InvalidFieldDomain,
    NonTerminatingSimulation,
)
from .field import FieldGrid, FieldSampler, square_field
from .simulator import TrajectorySimulator
from .types import COLLIMATOR, DETECTOR, Outcome, ParticleState, Termination, Trajectory

__all__ = [
    # Field
    "FieldGrid",
    "FieldSampler",
    "square_field",
    # Geometry
    "AbsorberRegion",
    "AbsorberSet",
    "COLLIMATOR",
    "DETECTOR",
    # State and results
    "ParticleState",
    "Trajectory",
    "Outcome",
    "Termination",
    # Simulation
    "SimulationConfig",
    "TrajectorySimulator",
    "EnsembleDriver",
    "EnsembleSummary",
    "GaussianMomentumSource",
    # Errors
    "BeamSimError",
    "InvalidConfiguration",
    "InvalidFieldDomain",
    "NonTerminatingSimulation",
]
