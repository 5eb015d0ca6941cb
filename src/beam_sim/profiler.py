# MIT License (see LICENSE)
"""
Lightweight timing of simulation phases.

The simulator can be handed a Profiler to accumulate wall-clock time spent
in its phases ("termination", "integrate") across every tracked particle,
which is how the cost of field sampling in RK4 stages shows up in practice.

Example:
    profiler = Profiler()
    simulator = TrajectorySimulator(field, absorbers, dtau, tau_final, profiler=profiler)
    EnsembleDriver(simulator, source, 1000).run_all()
    print(profiler.stats.summary()["integrate"])
"""
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
import time
from typing import Iterator


@dataclass
class ProfileStats:
    """Timing samples (seconds) keyed by section name."""
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        self.samples.setdefault(name, []).append(dt)

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per-section statistics.

        Returns:
            Dict mapping section name to a dict with keys 'n' (sample count),
            'total_ms', 'mean_ms' and 'max_ms'.
        """
        out = {}
        for name, times in self.samples.items():
            n = len(times)
            total = sum(times)
            out[name] = {
                "n": n,
                "total_ms": 1e3 * total,
                "mean_ms": 1e3 * total / n,
                "max_ms": 1e3 * max(times),
            }
        return out


class Profiler:
    """Collects ProfileStats through ``with profiler.section(name):`` blocks."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.stats.add(name, time.perf_counter() - t0)
