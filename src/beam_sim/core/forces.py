# MIT License (see LICENSE)
"""
Lorentz force in proper-time form.

For a particle of charge q and rest mass m in a field B pointing along z,
the momentum four-vector evolves as

    dp/dτ = q · B(x) · (p_y, -p_x, 0, 0) / m

B is in eV/m (see constants.py), p in eV and τ in metres, so dp/dτ comes out
in eV/m. The energy component is untouched: a magnetic field does no work.
"""
from __future__ import annotations

import numpy as np

from ..util import planar_cross_z


def lorentz_dp(field, x: np.ndarray, p: np.ndarray, charge: float, mass: float) -> np.ndarray:
    """
    Rate of change of momentum dp/dτ at position ``x`` with momentum ``p``.

    Args:
        field: Field source with a ``sample(position)`` method (eV/m).
        x: Position four-vector.
        p: Momentum four-vector.
        charge: Charge in units of e.
        mass: Rest mass in eV (the cached value, not recomputed from p).

    Raises:
        InvalidFieldDomain: Propagated from the field if x is off the map.
    """
    bz = field.sample(x)
    return (charge * bz / mass) * planar_cross_z(p)


def lorentz_dx(p: np.ndarray, mass: float) -> np.ndarray:
    """Rate of change of position dx/dτ = p / m (a four-velocity)."""
    return p / mass
