# MIT License (see LICENSE)
"""
Rectangular absorbers (collimators, detectors) that stop particles.

Each AbsorberRegion is an axis-aligned closed rectangle in world units with
an integer outcome tag. An AbsorberSet keeps regions in insertion order and
reports the first one containing a point, so earlier regions win where
rectangles overlap.

A region may carry an ``on_hit(region, state)`` hook. The set itself never
calls it; the simulator does, once, when that region terminates a particle.
This replaces a "detector" subclass that fills a histogram on collision.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from .errors import InvalidConfiguration
from .types import COLLIMATOR

if TYPE_CHECKING:
    from .types import ParticleState


HitHook = Callable[["AbsorberRegion", "ParticleState"], None]


@dataclass(frozen=True)
class AbsorberRegion:
    """
    Closed rectangle [x1, x2] × [y1, y2] with an outcome tag.

    Attributes:
        x1, x2, y1, y2: Bounds in world units (metres). Requires x1 ≤ x2, y1 ≤ y2.
        tag: Non-negative outcome code (COLLIMATOR, DETECTOR, ...).
        name: Optional label for reports and renderers.
        on_hit: Optional hook called as on_hit(region, state) when this
                region stops a particle.
    """
    x1: float
    x2: float
    y1: float
    y2: float
    tag: int = COLLIMATOR
    name: str = ""
    on_hit: HitHook | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.x1 > self.x2 or self.y1 > self.y2:
            raise InvalidConfiguration(
                f"Absorber bounds must satisfy x1<=x2 and y1<=y2, "
                f"got x=[{self.x1}, {self.x2}] y=[{self.y1}, {self.y2}]"
            )
        if int(self.tag) != self.tag or self.tag < 0:
            raise InvalidConfiguration(f"Absorber tag must be a non-negative integer, got {self.tag}")

    @classmethod
    def from_native(
        cls,
        x1: float,
        x2: float,
        y1: float,
        y2: float,
        length_unit: float,
        tag: int = COLLIMATOR,
        name: str = "",
        on_hit: HitHook | None = None,
    ) -> "AbsorberRegion":
        """Build a region from bounds given in field-map units (e.g. cm)."""
        return cls(
            x1 * length_unit, x2 * length_unit, y1 * length_unit, y2 * length_unit,
            tag=tag, name=name, on_hit=on_hit,
        )

    def contains(self, x: float, y: float) -> bool:
        """Inclusive point-in-rectangle test."""
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

    def native_bounds(self, length_unit: float) -> tuple[float, float, float, float]:
        """(x1, y1, x2, y2) divided by ``length_unit``, for drawing on the field map."""
        return (
            self.x1 / length_unit, self.y1 / length_unit,
            self.x2 / length_unit, self.y2 / length_unit,
        )


class AbsorberSet:
    """
    Ordered collection of absorber regions.

    Usage:
        absorbers = AbsorberSet()
        absorbers.add(AbsorberRegion(-0.02, -0.011, 0.03, 0.04))
        absorbers.add(AbsorberRegion(0.045, 0.05, -0.015, -0.005, tag=DETECTOR))
        absorbers.test_collision((0.047, -0.01))   # -> DETECTOR
    """

    def __init__(self, regions: list[AbsorberRegion] | tuple[AbsorberRegion, ...] = ()) -> None:
        self._regions: list[AbsorberRegion] = []
        for region in regions:
            self.add(region)

    def add(self, region: AbsorberRegion) -> int:
        """
        Append a region at the lowest priority.

        Returns:
            The region's index in the set.
        """
        if not isinstance(region, AbsorberRegion):
            raise TypeError(f"Expected AbsorberRegion, got {type(region)}")
        self._regions.append(region)
        return len(self._regions) - 1

    def first_hit(self, position) -> int | None:
        """Index of the first region containing ``position``, or None."""
        x, y = position[0], position[1]
        for i, region in enumerate(self._regions):
            if region.contains(x, y):
                return i
        return None

    def test_collision(self, position) -> int | None:
        """Tag of the first region containing ``position``, or None."""
        i = self.first_hit(position)
        return None if i is None else self._regions[i].tag

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[AbsorberRegion]:
        return iter(self._regions)

    def __getitem__(self, index: int) -> AbsorberRegion:
        return self._regions[index]
