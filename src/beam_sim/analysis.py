# MIT License (see LICENSE)
"""
Post-processing of tracking outcomes.

These helpers turn outcomes into the numbers the spectrometer analysis
looks at: energy spectra of all and of detected particles, a circle fit of
an orbit segment, and a flat outcome table. Plotting itself is left to
whichever toolkit consumes these arrays.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from .constants import TESLA, unit
from .types import Outcome, ParticleState


# =============================================================================
# Energy spectra
# =============================================================================

def energy_histogram(
    outcomes: Iterable[Outcome],
    bins: int = 100,
    range: tuple[float, float] = (0.0, 5 * unit.M),
    tag: int | None = None,
    kinetic: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Histogram of final energies.

    Args:
        outcomes: Outcomes to histogram.
        bins: Number of equal-width bins.
        range: (low, high) energy range in eV.
        tag: If given, only outcomes with this tag are counted
             (e.g. DETECTOR for the detected spectrum).
        kinetic: Histogram kinetic energy E - m instead of total energy.

    Returns:
        (counts, edges) as returned by numpy.histogram.

    Raises:
        ValueError: If kinetic is set and an outcome carries no kinetic energy.
    """
    energies = []
    for o in outcomes:
        if tag is not None and o.tag != tag:
            continue
        if not kinetic:
            energies.append(o.final_energy)
        elif o.final_kinetic_energy is None:
            raise ValueError(f"Outcome has no kinetic energy recorded: {o!r}")
        else:
            energies.append(o.final_kinetic_energy)
    return np.histogram(np.asarray(energies, dtype=np.float64), bins=bins, range=range)


def compare_histograms(all_counts: np.ndarray, detected_counts: np.ndarray) -> np.ndarray:
    """
    Scale the all-events spectrum so its peak matches the detected peak.

    Returns the scaled copy of ``all_counts`` as float64. An empty
    all-events histogram is returned unscaled.
    """
    all_counts = np.asarray(all_counts, dtype=np.float64)
    peak = all_counts.max() if all_counts.size else 0.0
    if peak <= 0:
        return all_counts.copy()
    return all_counts * (float(np.max(detected_counts)) / peak)


@dataclass
class EnergyRecorder:
    """
    Absorber hook that records the energy of every particle it stops.

    Usage:
        recorder = EnergyRecorder()
        detector = AbsorberRegion(0.045, 0.05, -0.015, -0.005, tag=DETECTOR, on_hit=recorder)
        ...
        counts, edges = recorder.histogram(bins=500, range=(0, 3e6))
    """
    energies: list[float] = field(default_factory=list)

    def __call__(self, region, state: ParticleState) -> None:
        self.energies.append(state.energy)

    def __len__(self) -> int:
        return len(self.energies)

    def histogram(
        self,
        bins: int = 500,
        range: tuple[float, float] = (0.0, 3 * unit.M),
    ) -> tuple[np.ndarray, np.ndarray]:
        return np.histogram(np.asarray(self.energies, dtype=np.float64), bins=bins, range=range)


@dataclass(frozen=True)
class GaussianFit:
    """Gaussian A·exp(-(x - mean)² / (2·sigma²)) fitted to a histogram."""
    amplitude: float
    mean: float
    sigma: float


def fit_gaussian(counts: np.ndarray, edges: np.ndarray) -> GaussianFit:
    """
    Fit a Gaussian to histogram counts at the bin centres.

    Uses the log-parabola method: ln(counts) is fitted with a quadratic in
    the bin centre by least squares, weighting each bin by its count so
    sparse tails do not dominate. Empty bins are ignored.

    Args:
        counts: Bin contents, as returned by numpy.histogram.
        edges: Bin edges, one more than ``counts``.

    Raises:
        ValueError: If fewer than 3 bins are populated or the populated bins
                    do not form a peak.
    """
    counts = np.asarray(counts, dtype=np.float64)
    edges = np.asarray(edges, dtype=np.float64)
    if edges.shape != (counts.size + 1,):
        raise ValueError(f"Expected {counts.size + 1} edges, got shape {edges.shape}")
    centres = 0.5 * (edges[:-1] + edges[1:])
    filled = counts > 0
    if np.count_nonzero(filled) < 3:
        raise ValueError("Need at least 3 populated bins to fit a Gaussian")

    y = counts[filled]
    # centre and scale x so the quadratic is well conditioned
    x0 = float(np.average(centres[filled], weights=y))
    scale = float(edges[-1] - edges[0])
    u = (centres[filled] - x0) / scale
    w = np.sqrt(y)
    A = np.column_stack([np.ones_like(u), u, u * u]) * w[:, None]
    (a, b, c), *_ = np.linalg.lstsq(A, np.log(y) * w, rcond=None)
    if not c < 0:
        raise ValueError("Histogram has no peak to fit")

    mean_u = -b / (2.0 * c)
    sigma_u = np.sqrt(-1.0 / (2.0 * c))
    return GaussianFit(
        amplitude=float(np.exp(a - b * b / (4.0 * c))),
        mean=float(x0 + mean_u * scale),
        sigma=float(sigma_u * scale),
    )


# =============================================================================
# Orbit fit
# =============================================================================

@dataclass(frozen=True)
class CircleFit:
    """Best-fit circle through a set of points."""
    radius: float
    x_center: float
    y_center: float
    rms: float


def fit_circle(points: np.ndarray) -> CircleFit:
    """
    Algebraic least-squares circle fit (Kåsa method).

    Solves x² + y² + D·x + E·y + F = 0 for D, E, F in the least-squares
    sense, then converts to centre and radius. Accurate for arcs that are
    not too short compared to the radius.

    Args:
        points: Array of shape (N, 2) with N >= 3.

    Returns:
        CircleFit with the rms of the radial residuals.
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2 or pts.shape[0] < 3:
        raise ValueError(f"Need an (N, 2) array with N >= 3, got shape {pts.shape}")
    x, y = pts[:, 0], pts[:, 1]
    A = np.column_stack([x, y, np.ones_like(x)])
    b = -(x * x + y * y)
    (D, E, F), *_ = np.linalg.lstsq(A, b, rcond=None)
    xc, yc = -0.5 * D, -0.5 * E
    r = float(np.sqrt(xc * xc + yc * yc - F))
    residuals = np.hypot(x - xc, y - yc) - r
    return CircleFit(radius=r, x_center=float(xc), y_center=float(yc),
                     rms=float(np.sqrt(np.mean(residuals * residuals))))


def expected_radius_gev(momentum: float, field_tesla: float) -> float:
    """
    Radius in metres from the rule of thumb p[GeV/c] = 0.3 · B[T] · R[m].

    Args:
        momentum: Momentum in eV/c.
        field_tesla: Field in Tesla.
    """
    return (momentum / unit.G) / 0.3 / field_tesla


def field_for_radius(momentum: float, radius: float, charge: float = 1.0) -> float:
    """Field in eV/m that bends |p| on a circle of ``radius`` metres."""
    return abs(momentum) / (abs(charge) * radius)


def tesla(field: float) -> float:
    """Convert a field in eV/m to Tesla."""
    return field / TESLA


# =============================================================================
# Tables
# =============================================================================

OUTCOME_DTYPE = np.dtype([("final_energy", np.float64), ("outcome_tag", np.int64)])


def outcome_table(outcomes: Iterable[Outcome]) -> np.ndarray:
    """Structured array with one (final_energy, outcome_tag) row per outcome."""
    rows = [(o.final_energy, int(o.tag)) for o in outcomes]
    return np.array(rows, dtype=OUTCOME_DTYPE)
