# MIT License (see LICENSE)
"""
Utility functions for four-vector math and numeric operations.

Four-vectors are numpy arrays of shape (4,): positions are (x, y, z, t) and
momenta are (px, py, pz, E). Motion is planar, so most helpers only look at
the x and y components.
"""
from __future__ import annotations
import math

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions and momenta.
    """
    return np.array(x, dtype=np.float64)


def vec4(x: float = 0.0, y: float = 0.0, z: float = 0.0, t: float = 0.0) -> np.ndarray:
    """Build a float64 four-vector from its components."""
    return np.array([x, y, z, t], dtype=np.float64)


def as_vec4(v) -> np.ndarray:
    """
    Promote a 2-, 3- or 4-component array-like to a four-vector.

    Missing trailing components are filled with zero.
    """
    a = f64(v).ravel()
    if a.shape[0] > 4 or a.shape[0] < 2:
        raise ValueError(f"Expected 2 to 4 components, got {a.shape[0]}")
    out = np.zeros(4, dtype=np.float64)
    out[: a.shape[0]] = a
    return out


def spatial_norm(p: np.ndarray) -> float:
    """Magnitude of the spatial part (px, py, pz) of a four-vector."""
    return float(math.sqrt(p[0] * p[0] + p[1] * p[1] + p[2] * p[2]))


def invariant_mass(p: np.ndarray) -> float:
    """
    Invariant mass m = sqrt(E² - |p|²) of a momentum four-vector.

    Space-like vectors (E² < |p|²) return the negative root, mirroring the
    usual Lorentz-vector convention, so callers can reject them.
    """
    m2 = p[3] * p[3] - (p[0] * p[0] + p[1] * p[1] + p[2] * p[2])
    if m2 < 0:
        return -float(math.sqrt(-m2))
    return float(math.sqrt(m2))


def planar_cross_z(p: np.ndarray) -> np.ndarray:
    """
    Cross product of the planar momentum with a unit z-field.

    (px, py, 0) × (0, 0, 1) = (py, -px, 0). The energy slot is left at zero,
    so a force built from this vector never changes E.
    """
    return np.array([p[1], -p[0], 0.0, 0.0], dtype=np.float64)
