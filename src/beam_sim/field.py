# MIT License (see LICENSE)
"""
Magnetic field maps and bilinear sampling.

A FieldGrid holds field values on a regular grid of nodes in the map's native
units (for instance centimetres and millitesla). A FieldSampler wraps a grid
with two unit multipliers and answers "what is B at this world position?":

    B(x, y) = field_unit · bilinear(values, x / length_unit, y / length_unit)

The field is the z-component of B; motion stays in the xy-plane.

Key concepts:
- Nodes span the closed rectangle [xmin, xmax] × [ymin, ymax] inclusive.
- Sampling outside that rectangle raises InvalidFieldDomain; the simulator's
  boundary check is expected to stop particles before they get there.
"""
from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Callable, Protocol

import numpy as np

from .errors import InvalidConfiguration, InvalidFieldDomain


class FieldSource(Protocol):
    """Anything the integrator can query for a field value."""

    def sample(self, position) -> float: ...

    @property
    def bounds(self) -> tuple[float, float, float, float]: ...


@dataclass(frozen=True, eq=False)
class FieldGrid:
    """
    Immutable 2D grid of scalar field values.

    Attributes:
        values: Array of shape (width, height); values[ix, iy] is the field at
                node (xmin + ix·dx, ymin + iy·dy).
        xmin, xmax, ymin, ymax: Bounding rectangle in native length units.
    """
    values: np.ndarray
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] < 2 or values.shape[1] < 2:
            raise InvalidConfiguration(
                f"Field grid needs at least 2x2 nodes, got shape {values.shape}"
            )
        if not np.all(np.isfinite(values)):
            raise InvalidConfiguration("Field grid contains non-finite values")
        if not (self.xmin < self.xmax and self.ymin < self.ymax):
            raise InvalidConfiguration(
                f"Degenerate field bounds x=[{self.xmin}, {self.xmax}] y=[{self.ymin}, {self.ymax}]"
            )
        values.setflags(write=False)
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "xmin", float(self.xmin))
        object.__setattr__(self, "xmax", float(self.xmax))
        object.__setattr__(self, "ymin", float(self.ymin))
        object.__setattr__(self, "ymax", float(self.ymax))

    @classmethod
    def uniform(
        cls,
        value: float,
        x_range: tuple[float, float],
        y_range: tuple[float, float],
        shape: tuple[int, int] = (2, 2),
    ) -> "FieldGrid":
        """Grid with the same value at every node."""
        return cls(np.full(shape, float(value)), x_range[0], x_range[1], y_range[0], y_range[1])

    @classmethod
    def from_function(
        cls,
        fn: Callable[[np.ndarray, np.ndarray], np.ndarray],
        x_range: tuple[float, float],
        y_range: tuple[float, float],
        shape: tuple[int, int],
    ) -> "FieldGrid":
        """
        Tabulate ``fn(X, Y)`` on a regular grid.

        ``fn`` receives meshgrid arrays indexed [ix, iy] and must return an
        array of the same shape.
        """
        xs = np.linspace(x_range[0], x_range[1], shape[0])
        ys = np.linspace(y_range[0], y_range[1], shape[1])
        X, Y = np.meshgrid(xs, ys, indexing="ij")
        return cls(np.asarray(fn(X, Y), dtype=np.float64), x_range[0], x_range[1], y_range[0], y_range[1])

    @property
    def width(self) -> int:
        """Number of nodes along x."""
        return int(self.values.shape[0])

    @property
    def height(self) -> int:
        """Number of nodes along y."""
        return int(self.values.shape[1])

    @property
    def dx(self) -> float:
        return (self.xmax - self.xmin) / (self.width - 1)

    @property
    def dy(self) -> float:
        return (self.ymax - self.ymin) / (self.height - 1)

    def get_cell(self, ix: int, iy: int) -> float:
        """Field value at node (ix, iy)."""
        return float(self.values[ix, iy])

    def contains(self, x: float, y: float) -> bool:
        """True if (x, y) lies in the closed grid rectangle (native units)."""
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def interpolate(self, x: float, y: float) -> float:
        """
        Bilinear interpolation at native coordinates (x, y).

        Uses the 4 nodes of the cell containing the point; points on the
        upper edges fall into the last cell.

        Raises:
            InvalidFieldDomain: If (x, y) is outside the grid rectangle.
        """
        if not self.contains(x, y):
            raise InvalidFieldDomain(
                f"Field sampled at ({x}, {y}) outside grid "
                f"[{self.xmin}, {self.xmax}] x [{self.ymin}, {self.ymax}]"
            )
        u = (x - self.xmin) / self.dx
        v = (y - self.ymin) / self.dy
        ix = min(int(math.floor(u)), self.width - 2)
        iy = min(int(math.floor(v)), self.height - 2)
        tx = u - ix
        ty = v - iy

        f = self.values
        f00 = f[ix, iy]
        f10 = f[ix + 1, iy]
        f01 = f[ix, iy + 1]
        f11 = f[ix + 1, iy + 1]
        return float(
            (1.0 - tx) * (1.0 - ty) * f00
            + tx * (1.0 - ty) * f10
            + (1.0 - tx) * ty * f01
            + tx * ty * f11
        )


def square_field(
    value: float,
    half_width: float,
    padding: float,
    spacing: float,
) -> FieldGrid:
    """
    Field of ``value`` inside a centred square and zero in a padding band.

    The square is [-half_width, half_width]² and the grid extends
    ``padding`` beyond it on every side, with node spacing ``spacing``.
    All lengths are in native units.
    """
    extent = half_width + padding
    n = int(round(2 * extent / spacing)) + 1
    # Tolerance keeps nodes that land on the square's edge inside it.
    tol = 1e-9 * max(1.0, extent)

    def fn(X: np.ndarray, Y: np.ndarray) -> np.ndarray:
        inside = (np.abs(X) <= half_width + tol) & (np.abs(Y) <= half_width + tol)
        return np.where(inside, value, 0.0)

    return FieldGrid.from_function(fn, (-extent, extent), (-extent, extent), (n, n))


class FieldSampler:
    """
    World-space view of a FieldGrid.

    Converts world coordinates to grid coordinates by dividing by
    ``length_unit`` and scales the interpolated value by ``field_unit`` into
    the eV/m convention the integrator uses.

    Example:
        grid = load_field_grid("mfield.npz")            # cm, mT
        field = FieldSampler(grid, length_unit=unit.c, field_unit=unit.m * TESLA)
        bz = field.sample((0.01, 0.02))                 # eV/m at (1 cm, 2 cm)
    """

    def __init__(self, grid: FieldGrid, length_unit: float = 1.0, field_unit: float = 1.0):
        if not length_unit > 0:
            raise InvalidConfiguration(f"length_unit must be positive, got {length_unit}")
        if not math.isfinite(field_unit):
            raise InvalidConfiguration(f"field_unit must be finite, got {field_unit}")
        self.grid = grid
        self.length_unit = float(length_unit)
        self.field_unit = float(field_unit)

    def sample(self, position) -> float:
        """
        Field value at a world position.

        Args:
            position: Four-vector or (x, y) pair in world units.

        Raises:
            InvalidFieldDomain: If the position maps outside the grid.
        """
        return self.grid.interpolate(
            position[0] / self.length_unit, position[1] / self.length_unit
        ) * self.field_unit

    __call__ = sample

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(xmin, xmax, ymin, ymax) in world units."""
        g, L = self.grid, self.length_unit
        return g.xmin * L, g.xmax * L, g.ymin * L, g.ymax * L
