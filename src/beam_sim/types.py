# MIT License (see LICENSE)
"""
Core type definitions for the particle tracking simulation.

Defines the fundamental data structures:
- ParticleState: position and momentum four-vectors of one particle plus
  its charge and (fixed) rest mass.
- Trajectory: append-only list of (x, y) samples.
- Termination / Outcome: why and where a trajectory ended.

The equations of motion are integrated in proper time τ:
  - dx/dτ = p / m
  - dp/dτ = q · B(x) · (p_y, -p_x, 0, 0) / m
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
import math

import numpy as np

from .errors import InvalidConfiguration
from .util import as_vec4, invariant_mass, spatial_norm


# =============================================================================
# Termination tags
# =============================================================================

class Termination(IntEnum):
    """
    Reason a trajectory stopped.

    TIME_LIMIT and BOUNDARY_ESCAPE are negative so they never collide with
    absorber tags, which are required to be non-negative. ABSORBED is only
    used as a ``reason``; the outcome's ``tag`` then carries the absorber tag.
    """
    ABSORBED = 0
    TIME_LIMIT = -1
    BOUNDARY_ESCAPE = -2


# Absorber tags used by the spectrometer setups.
COLLIMATOR = 0
DETECTOR = 1


# =============================================================================
# Particle state
# =============================================================================

@dataclass
class ParticleState:
    """
    Kinematic state of one charged particle.

    Attributes:
        position: Four-vector (x, y, z, t) in metres; t accumulates lab time·c.
        momentum: Four-vector (px, py, pz, E) in eV.
        charge: Charge in units of e (-1 for an electron).
        mass: Rest mass in eV. Derived once from the initial momentum if not
              given, and never recomputed while integrating.
        tau: Proper time elapsed (metres).
        step_index: Number of accepted integration steps.

    Note:
        Position and momentum are converted to float64 four-vectors on init;
        2- or 3-component inputs are zero-padded.
    """
    position: np.ndarray | tuple[float, ...]
    momentum: np.ndarray | tuple[float, ...]
    charge: float = -1.0
    mass: float | None = None
    tau: float = 0.0
    step_index: int = 0

    def __post_init__(self) -> None:
        self.position = as_vec4(self.position)
        self.momentum = as_vec4(self.momentum)
        if self.mass is None:
            self.mass = invariant_mass(self.momentum)
        self.mass = float(self.mass)
        if not self.mass > 0:
            raise InvalidConfiguration(f"Rest mass must be positive, got {self.mass}")

    @classmethod
    def from_mass(
        cls,
        position: tuple[float, float] | np.ndarray,
        momentum: tuple[float, float] | np.ndarray,
        mass: float,
        charge: float = -1.0,
    ) -> "ParticleState":
        """
        Build a state from a planar position, planar momentum and rest mass.

        The energy component is set on the mass shell, E = sqrt(m² + |p|²).
        """
        if not mass > 0:
            raise InvalidConfiguration(f"Rest mass must be positive, got {mass}")
        p = as_vec4(momentum)
        p[3] = math.sqrt(mass * mass + spatial_norm(p) ** 2)
        return cls(position=as_vec4(position), momentum=p, charge=charge, mass=mass)

    @property
    def xy(self) -> tuple[float, float]:
        """Planar position as a plain tuple."""
        return float(self.position[0]), float(self.position[1])

    @property
    def energy(self) -> float:
        """Total energy E in eV."""
        return float(self.momentum[3])

    @property
    def kinetic_energy(self) -> float:
        """Kinetic energy E - m in eV."""
        return self.energy - self.mass

    @property
    def momentum_magnitude(self) -> float:
        """|p| in eV/c."""
        return spatial_norm(self.momentum)

    @property
    def gamma(self) -> float:
        """Lorentz factor E / m."""
        return self.energy / self.mass

    @property
    def beta(self) -> float:
        """Speed as a fraction of c, |p| / E."""
        return self.momentum_magnitude / self.energy

    def copy(self) -> "ParticleState":
        """Independent copy (four-vectors are not shared)."""
        return ParticleState(
            position=self.position.copy(),
            momentum=self.momentum.copy(),
            charge=self.charge,
            mass=self.mass,
            tau=self.tau,
            step_index=self.step_index,
        )


# =============================================================================
# Trajectory and outcome
# =============================================================================

class Trajectory:
    """
    Append-only sequence of (x, y) points in world units.

    Owned by a single simulator run. Index 0 is the initial position and
    index k the position after k accepted steps.
    """

    def __init__(self) -> None:
        self._points: list[tuple[float, float]] = []

    def append(self, x: float, y: float) -> None:
        self._points.append((float(x), float(y)))

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> tuple[float, float]:
        return self._points[index]

    def __iter__(self):
        return iter(self._points)

    def as_array(self) -> np.ndarray:
        """Points as an (N, 2) float64 array."""
        if not self._points:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array(self._points, dtype=np.float64)

    def to_native(self, length_unit: float) -> np.ndarray:
        """Points divided by ``length_unit``, i.e. in field-map coordinates."""
        return self.as_array() / length_unit


@dataclass(frozen=True)
class Outcome:
    """
    Result of tracking one particle to termination.

    Attributes:
        final_energy: Energy E of the particle when it stopped (eV).
        tag: Termination.TIME_LIMIT, Termination.BOUNDARY_ESCAPE, or the tag
             of the absorber that stopped it.
        absorber_index: Index of the absorber in its set, None otherwise.
        steps: Number of accepted integration steps.
        tau: Proper time elapsed (metres).
        final_position: Planar position at termination.
        final_kinetic_energy: Kinetic energy E - m when it stopped (eV); None
                              for outcomes not produced by a simulator run.
        trajectory: Recorded path (only the end points if recording was off).
    """
    final_energy: float
    tag: int
    absorber_index: int | None = None
    steps: int = 0
    tau: float = 0.0
    final_position: tuple[float, float] = (0.0, 0.0)
    final_kinetic_energy: float | None = None
    trajectory: Trajectory = field(default_factory=Trajectory, repr=False, compare=False)

    @property
    def reason(self) -> Termination:
        if self.absorber_index is not None:
            return Termination.ABSORBED
        return Termination(self.tag)

    @property
    def detected(self) -> bool:
        """True if a detector-tagged absorber stopped the particle."""
        return self.absorber_index is not None and self.tag == DETECTOR

    def as_record(self) -> dict[str, float | int]:
        """Plain export record for an external tabular store."""
        return {"final_energy": self.final_energy, "outcome_tag": int(self.tag)}
