# MIT License (see LICENSE)
"""
Running many independent particles through one simulator.

The ensemble layer is deliberately thin: it asks an initial-condition source
for a fresh ParticleState, hands it to a shared TrajectorySimulator and
yields the Outcome. Nothing but the read-only field map and absorbers is
shared between particles, so outcomes can be streamed into histograms or
plots without holding the whole ensemble in memory.

Key concepts:
- InitialConditionSource: any callable index -> ParticleState.
- GaussianMomentumSource: the beta-spectrometer source, with momentum
  magnitude drawn from a normal distribution (re-drawn until positive) and
  a uniformly random direction in the plane.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
import logging
import math
from typing import Iterable, Iterator, Protocol

import numpy as np

from .constants import ELECTRON_CHARGE, ELECTRON_MASS
from .errors import InvalidConfiguration
from .simulator import TrajectorySimulator
from .types import DETECTOR, Outcome, ParticleState, Termination

logger = logging.getLogger(__name__)


class InitialConditionSource(Protocol):
    """Produces the initial state of particle number ``index``."""

    def __call__(self, index: int) -> ParticleState: ...


@dataclass
class GaussianMomentumSource:
    """
    Particles from a fixed point with Gaussian |p| and isotropic direction.

    Attributes:
        position: Start position (x, y) in world units.
        momentum_mean: Mean momentum magnitude in eV/c.
        momentum_sigma: Standard deviation of the magnitude in eV/c.
        mass: Rest mass in eV.
        charge: Charge in units of e.
        seed: Seed for numpy's default_rng (determinism).
    """
    position: tuple[float, float]
    momentum_mean: float
    momentum_sigma: float
    mass: float = ELECTRON_MASS
    charge: float = ELECTRON_CHARGE
    seed: int | None = None
    rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.rng = np.random.default_rng(self.seed)

    def draw_momentum(self) -> float:
        """Normal sample of |p|, rejecting non-positive values."""
        p = 0.0
        while p <= 0:
            p = float(self.rng.normal(self.momentum_mean, self.momentum_sigma))
        return p

    def __call__(self, index: int) -> ParticleState:
        p = self.draw_momentum()
        angle = float(self.rng.uniform(0.0, 2.0 * math.pi))
        return ParticleState.from_mass(
            self.position,
            (p * math.cos(angle), p * math.sin(angle)),
            self.mass,
            self.charge,
        )


@dataclass
class EnsembleSummary:
    """
    Tally of outcomes by tag.

    Attributes:
        total: Number of particles.
        counts: Tag -> number of particles with that tag.
    """
    total: int = 0
    counts: Counter = field(default_factory=Counter)

    def add(self, outcome: Outcome) -> None:
        self.total += 1
        self.counts[outcome.tag] += 1

    @property
    def time_limited(self) -> int:
        return self.counts[int(Termination.TIME_LIMIT)]

    @property
    def escaped(self) -> int:
        return self.counts[int(Termination.BOUNDARY_ESCAPE)]

    @property
    def detected(self) -> int:
        return self.counts[DETECTOR]

    @property
    def detected_fraction(self) -> float:
        return self.detected / self.total if self.total else 0.0


def summarize(outcomes: Iterable[Outcome]) -> EnsembleSummary:
    """Tally an iterable of outcomes."""
    summary = EnsembleSummary()
    for outcome in outcomes:
        summary.add(outcome)
    return summary


@dataclass
class EnsembleDriver:
    """
    Tracks ``count`` particles drawn from ``source`` with one simulator.

    Usage:
        driver = EnsembleDriver(simulator, GaussianMomentumSource(...), count=10000)
        for outcome in driver.run():
            ...
    """
    simulator: TrajectorySimulator
    source: InitialConditionSource
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise InvalidConfiguration(f"count must be non-negative, got {self.count}")

    def run(self) -> Iterator[Outcome]:
        """Lazily yield one Outcome per particle, in index order."""
        for i in range(self.count):
            yield self.simulator.run(self.source(i))

    def run_all(self) -> tuple[list[Outcome], EnsembleSummary]:
        """Run every particle, returning the outcomes and their summary."""
        outcomes = []
        summary = EnsembleSummary()
        for outcome in self.run():
            outcomes.append(outcome)
            summary.add(outcome)
        logger.info(
            "ensemble finished: %d particles, %d detected, %d escaped, %d time-limited",
            summary.total, summary.detected, summary.escaped, summary.time_limited,
        )
        return outcomes, summary
