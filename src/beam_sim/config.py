# MIT License (see LICENSE)
"""
Configuration surface for a simulation run.

A SimulationConfig collects every number a run needs besides the field map
itself: step size, time limit, boundary margin, unit multipliers, particle
species and the ordered absorber list. It is built programmatically or read
from JSON (see io.json_io) and validated before any particle is tracked.

Defaults reproduce the beta-spectrometer prototype: an electron tracked for
1 ns of proper time in steps of 1 ps through a field map stored in
centimetres and millitesla.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import math

from .absorbers import AbsorberRegion
from .constants import ELECTRON_CHARGE, ELECTRON_MASS, SECOND, TESLA, unit
from .errors import InvalidConfiguration
from .types import ParticleState

# Ten million steps is 10 µs of proper time at the default 1 ps step.
DEFAULT_MAX_STEPS = 10_000_000

# Boundary margin in metres (5 mm), shared with TrajectorySimulator.
DEFAULT_EDGE_MARGIN = 0.005


@dataclass
class SimulationConfig:
    """
    Parameters of a tracking run.

    Attributes:
        dtau: Proper-time step in metres (time × c).
        tau_final: Proper-time limit in metres; a particle whose elapsed
                   proper time exceeds it stops with Termination.TIME_LIMIT.
        edge_margin: Distance (world units) from the field-map edge at which
                     a particle already counts as escaped.
        length_unit: Metres per native field-map length unit.
        field_unit: eV/m per native field-map value.
        charge: Particle charge in units of e.
        rest_mass: Particle rest mass in eV.
        absorbers: Ordered absorber regions; earlier entries win on overlap.
        max_steps: Hard iteration cap; reaching it raises NonTerminatingSimulation.
    """
    dtau: float = 0.001 * unit.n * SECOND
    tau_final: float = 1 * unit.n * SECOND
    edge_margin: float = DEFAULT_EDGE_MARGIN
    length_unit: float = unit.c
    field_unit: float = unit.m * TESLA
    charge: float = ELECTRON_CHARGE
    rest_mass: float = ELECTRON_MASS
    absorbers: list[AbsorberRegion] = field(default_factory=list)
    max_steps: int = DEFAULT_MAX_STEPS

    def validate(self) -> None:
        """
        Check every parameter, raising on the first problem found.

        Raises:
            InvalidConfiguration: Describing the offending value.
        """
        if not self.rest_mass > 0:
            raise InvalidConfiguration(f"rest_mass must be positive, got {self.rest_mass}")
        if not (self.dtau > 0 and math.isfinite(self.dtau)):
            raise InvalidConfiguration(f"dtau must be positive and finite, got {self.dtau}")
        if not self.dtau < self.tau_final:
            raise InvalidConfiguration(
                f"dtau must be smaller than tau_final, got dtau={self.dtau} tau_final={self.tau_final}"
            )
        if not self.edge_margin >= 0:
            raise InvalidConfiguration(f"edge_margin must be non-negative, got {self.edge_margin}")
        if not self.length_unit > 0:
            raise InvalidConfiguration(f"length_unit must be positive, got {self.length_unit}")
        if not math.isfinite(self.field_unit):
            raise InvalidConfiguration(f"field_unit must be finite, got {self.field_unit}")
        if self.max_steps < 1:
            raise InvalidConfiguration(f"max_steps must be at least 1, got {self.max_steps}")
        for region in self.absorbers:
            if not isinstance(region, AbsorberRegion):
                raise InvalidConfiguration(f"Expected AbsorberRegion, got {type(region)}")

    def particle(
        self,
        position: tuple[float, float],
        momentum: tuple[float, float],
    ) -> ParticleState:
        """Initial state for this run's species at a world position with planar momentum (eV)."""
        return ParticleState.from_mass(position, momentum, self.rest_mass, self.charge)
