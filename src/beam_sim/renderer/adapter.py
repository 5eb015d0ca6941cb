# MIT License (see LICENSE)
"""
Renderer adapters for trajectory visualization.

The tracking core has no plotting dependency. These adapters define how a
run's geometry (absorbers) and results (trajectories with their outcome
tags) are handed to a drawing backend, and ship a text renderer, a no-op
renderer and a buffering renderer for batch export.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, TextIO
import sys

import numpy as np

from ..absorbers import AbsorberRegion
from ..types import Outcome, Termination


class RendererAdapter(ABC):
    """
    Abstract base class for renderer implementations.

    Subclasses integrate with a graphics backend (matplotlib, ROOT, a web
    frontend, ...).

    Usage:
        renderer = MyRenderer()
        renderer.begin_run("all tracks")
        for region in absorbers:
            renderer.draw_absorber(region)
        for outcome in outcomes:
            renderer.draw_trajectory(outcome)
        renderer.end_run()

    Or use the convenience method:
        renderer.render_outcomes(outcomes, absorbers)
    """

    @abstractmethod
    def begin_run(self, title: str) -> None:
        """Begin a new picture."""
        ...

    @abstractmethod
    def draw_absorber(self, region: AbsorberRegion) -> None:
        """Draw one absorber rectangle."""
        ...

    @abstractmethod
    def draw_trajectory(self, outcome: Outcome) -> None:
        """Draw one particle's trajectory."""
        ...

    @abstractmethod
    def end_run(self) -> None:
        """Finalize the picture."""
        ...

    def render_outcomes(
        self,
        outcomes: Iterable[Outcome],
        absorbers: Iterable[AbsorberRegion] = (),
        title: str = "tracks",
        tag: int | None = None,
    ) -> None:
        """
        Draw absorbers and trajectories in one picture.

        Args:
            outcomes: Outcomes whose trajectories are drawn.
            absorbers: Regions drawn underneath.
            title: Picture title.
            tag: If given, only outcomes with this tag are drawn
                 (e.g. DETECTOR for "detected tracks").
        """
        self.begin_run(title)
        for region in absorbers:
            self.draw_absorber(region)
        for outcome in outcomes:
            if tag is None or outcome.tag == tag:
                self.draw_trajectory(outcome)
        self.end_run()


def _describe_tag(outcome: Outcome) -> str:
    reason = outcome.reason
    if reason is Termination.ABSORBED:
        return f"absorber[{outcome.absorber_index}] tag={outcome.tag}"
    return reason.name.lower()


class DebugRenderer(RendererAdapter):
    """
    Text renderer for development and testing.

    Output:
        === tracks ===
        absorber 'detector' [0.045, 0.05] x [-0.015, -0.005] tag=1
        track 412 pts (-0.0100, 0.0400) -> (0.0471, -0.0098) absorber[4] tag=1 E=1.2e+06
    """

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def begin_run(self, title: str) -> None:
        self.output.write(f"=== {title} ===\n")

    def draw_absorber(self, region: AbsorberRegion) -> None:
        label = f" '{region.name}'" if region.name else ""
        self.output.write(
            f"absorber{label} [{region.x1:.4g}, {region.x2:.4g}] x "
            f"[{region.y1:.4g}, {region.y2:.4g}] tag={region.tag}\n"
        )

    def draw_trajectory(self, outcome: Outcome) -> None:
        traj = outcome.trajectory
        if len(traj) == 0:
            return
        x0, y0 = traj[0]
        x1, y1 = traj[-1]
        self.output.write(
            f"track {len(traj)} pts ({x0:.4f}, {y0:.4f}) -> ({x1:.4f}, {y1:.4f}) "
            f"{_describe_tag(outcome)} E={outcome.final_energy:.4g}\n"
        )

    def end_run(self) -> None:
        self.output.write("\n")
        self.output.flush()


class NullRenderer(RendererAdapter):
    """No-op renderer, useful for timing runs without drawing overhead."""

    def begin_run(self, title: str) -> None:
        pass

    def draw_absorber(self, region: AbsorberRegion) -> None:
        pass

    def draw_trajectory(self, outcome: Outcome) -> None:
        pass

    def end_run(self) -> None:
        pass


class BufferedRenderer(RendererAdapter):
    """
    Renderer that stores pictures as plain data for later plotting.

    Each finished picture is a dict with its title, the absorber rectangles
    as (x1, y1, x2, y2) tuples and the trajectories as (N, 2) arrays with
    their tags. ``length_unit`` rescales everything to field-map units.
    """

    def __init__(self, length_unit: float = 1.0):
        self.length_unit = length_unit
        self.pictures: list[dict] = []
        self._current: dict | None = None

    def begin_run(self, title: str) -> None:
        self._current = {"title": title, "absorbers": [], "tracks": []}

    def draw_absorber(self, region: AbsorberRegion) -> None:
        if self._current is None:
            return
        self._current["absorbers"].append(region.native_bounds(self.length_unit))

    def draw_trajectory(self, outcome: Outcome) -> None:
        if self._current is None:
            return
        points: np.ndarray = outcome.trajectory.to_native(self.length_unit)
        self._current["tracks"].append({"tag": int(outcome.tag), "points": points})

    def end_run(self) -> None:
        if self._current is not None:
            self.pictures.append(self._current)
            self._current = None

    def clear(self) -> None:
        self.pictures.clear()
