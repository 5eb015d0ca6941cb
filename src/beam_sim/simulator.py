# MIT License (see LICENSE)
"""
Single-particle tracking loop.

The TrajectorySimulator drives one particle from its initial state to
termination. A particle is either running or terminated; before every step
the current state is checked against an ordered predicate:

    1. elapsed proper time (step_index · dτ) exceeds τ_final  -> TIME_LIMIT
    2. position within edge_margin of, or beyond, any edge of
       the field map                                          -> BOUNDARY_ESCAPE
    3. position inside an absorber (first match in order)     -> absorber tag

The first condition that holds decides the outcome, so the time limit wins
over geometry and the map boundary wins over an absorber at the same point.
Otherwise one RK4 step is taken and the new (x, y) is recorded.
A step whose RK4 stages would sample the field beyond the map edge is
discarded and the particle ends as BOUNDARY_ESCAPE at its last position,
so a margin smaller than one step length never aborts a run.

Structure:
    - Build a simulator once per run (field + absorbers + step settings).
    - Call run(state) for every particle; the simulator keeps no state
      between particles, so it can be shared by an ensemble driver.
"""
from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Generator

from .absorbers import AbsorberSet
from .config import DEFAULT_EDGE_MARGIN, DEFAULT_MAX_STEPS, SimulationConfig
from .core.integrators import rk4_step
from .errors import InvalidConfiguration, InvalidFieldDomain, NonTerminatingSimulation
from .field import FieldSampler, FieldSource
from .profiler import Profiler
from .types import Outcome, ParticleState, Termination, Trajectory

if TYPE_CHECKING:
    from .field import FieldGrid

logger = logging.getLogger(__name__)


@dataclass
class TrajectorySimulator:
    """
    Tracks particles through a field map until they stop.

    Attributes:
        magnetic_field: Field source providing sample(position) and bounds
                        (world units).
        absorbers: Ordered absorber set; a plain list is wrapped on init.
        dtau: Proper-time step in metres.
        tau_final: Proper-time limit in metres.
        edge_margin: Distance from the map edge treated as already escaped.
                     Interpolation right at the edge is unreliable. Defaults to
                     the configuration default of 5 mm.
        max_steps: Iteration cap; NonTerminatingSimulation is raised if a
                   particle reaches it while still running.
        record_trajectory: If False, only the initial and final points are
                           kept, which is enough for energy spectra.
        profiler: Optional Profiler timing the "termination" and
                  "integrate" sections.
    """
    magnetic_field: FieldSource
    absorbers: AbsorberSet = field(default_factory=AbsorberSet)
    dtau: float = 1e-3
    tau_final: float = 1.0
    edge_margin: float = DEFAULT_EDGE_MARGIN
    max_steps: int = DEFAULT_MAX_STEPS
    record_trajectory: bool = True
    profiler: Profiler | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.absorbers, AbsorberSet):
            self.absorbers = AbsorberSet(self.absorbers)
        if not self.dtau > 0:
            raise InvalidConfiguration(f"dtau must be positive, got {self.dtau}")
        if not self.dtau < self.tau_final:
            raise InvalidConfiguration(
                f"dtau must be smaller than tau_final, got dtau={self.dtau} tau_final={self.tau_final}"
            )
        if not self.edge_margin >= 0:
            raise InvalidConfiguration(f"edge_margin must be non-negative, got {self.edge_margin}")
        if self.max_steps < 1:
            raise InvalidConfiguration(f"max_steps must be at least 1, got {self.max_steps}")

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        grid: "FieldGrid",
        record_trajectory: bool = True,
        profiler: Profiler | None = None,
    ) -> "TrajectorySimulator":
        """
        Build a simulator from a validated configuration and a field map.

        The grid is wrapped in a FieldSampler using the config's length and
        field units; absorbers are taken in config order.
        """
        config.validate()
        return cls(
            magnetic_field=FieldSampler(grid, config.length_unit, config.field_unit),
            absorbers=AbsorberSet(config.absorbers),
            dtau=config.dtau,
            tau_final=config.tau_final,
            edge_margin=config.edge_margin,
            max_steps=config.max_steps,
            record_trajectory=record_trajectory,
            profiler=profiler,
        )

    def escaped(self, x: float, y: float) -> bool:
        """True if (x, y) is within edge_margin of, or outside, the map edge."""
        xmin, xmax, ymin, ymax = self.magnetic_field.bounds
        m = self.edge_margin
        return (
            x - m <= xmin or xmax <= x + m or
            y - m <= ymin or ymax <= y + m
        )

    def check_termination(self, state: ParticleState) -> tuple[int, int | None] | None:
        """
        Evaluate the termination predicate on the current state.

        Returns:
            None while the particle keeps running, otherwise a pair
            (tag, absorber_index) where absorber_index is None for the time
            limit and boundary escape.
        """
        if state.step_index * self.dtau > self.tau_final:
            return int(Termination.TIME_LIMIT), None

        x, y = state.xy
        if self.escaped(x, y):
            return int(Termination.BOUNDARY_ESCAPE), None

        i = self.absorbers.first_hit((x, y))
        if i is not None:
            return self.absorbers[i].tag, i
        return None

    def step(self, state: ParticleState) -> bool:
        """
        Take one RK4 step and advance the step counter and proper time.

        Returns:
            False if an RK4 stage sampled the field off the map. The state is
            then left exactly as it was before the step and the particle
            counts as escaped.
        """
        prof = self.profiler
        try:
            if prof:
                with prof.section("integrate"):
                    rk4_step(state, self.dtau, self.magnetic_field)
            else:
                rk4_step(state, self.dtau, self.magnetic_field)
        except InvalidFieldDomain as exc:
            logger.debug("step %d left the field map: %s", state.step_index, exc)
            return False
        state.step_index += 1
        state.tau = state.step_index * self.dtau
        return True

    def _check(self, state: ParticleState) -> tuple[int, int | None] | None:
        prof = self.profiler
        if prof:
            with prof.section("termination"):
                return self.check_termination(state)
        return self.check_termination(state)

    def iter_steps(
        self, state: ParticleState
    ) -> Generator[ParticleState, None, tuple[int, int | None]]:
        """
        Step ``state`` until it terminates, yielding it after every step.

        The same (mutated) object is yielded each time; copy it if snapshots
        are needed. The generator's return value is the (tag, absorber_index)
        pair that stopped the particle.

        Raises:
            NonTerminatingSimulation: If max_steps is reached while running.
        """
        while True:
            result = self._check(state)
            if result is not None:
                return result
            if state.step_index >= self.max_steps:
                raise NonTerminatingSimulation(
                    f"Particle still running after {state.step_index} steps "
                    f"(tau={state.tau}, position={state.xy}); check units and tau_final"
                )
            if not self.step(state):
                return int(Termination.BOUNDARY_ESCAPE), None
            yield state

    def run(self, state: ParticleState) -> Outcome:
        """
        Track ``state`` to termination.

        The state is modified in place and is terminal afterwards. If the
        stopping absorber has an on_hit hook it is called once with the
        final state.

        Returns:
            Outcome with final energy, tag and recorded trajectory.
        """
        trajectory = Trajectory()
        trajectory.append(*state.xy)
        steps = self.iter_steps(state)
        while True:
            try:
                s = next(steps)
            except StopIteration as stop:
                tag, index = stop.value
                break
            if self.record_trajectory:
                trajectory.append(*s.xy)
        if not self.record_trajectory and state.step_index > 0:
            trajectory.append(*state.xy)

        if index is not None:
            region = self.absorbers[index]
            if region.on_hit is not None:
                region.on_hit(region, state)

        logger.debug(
            "particle terminated: tag=%d absorber=%s steps=%d at (%.6g, %.6g)",
            tag, index, state.step_index, state.position[0], state.position[1],
        )
        return Outcome(
            final_energy=state.energy,
            tag=tag,
            absorber_index=index,
            steps=state.step_index,
            tau=state.tau,
            final_position=state.xy,
            final_kinetic_energy=state.kinetic_energy,
            trajectory=trajectory,
        )
