# MIT License (see LICENSE)
"""
Utilities for checking conserved quantities along a trajectory.

A static magnetic field does no work, so the energy and the momentum
magnitude of a tracked particle should stay constant. The integrator keeps
E exactly constant by construction; |p| drifts slightly with step size and
is the natural measure of integration error.
"""
from __future__ import annotations

from ..types import ParticleState


def momentum_drift(initial: ParticleState, current: ParticleState) -> float:
    """Relative change of |p| between two states."""
    p0 = initial.momentum_magnitude
    return abs(current.momentum_magnitude - p0) / max(1e-300, p0)


def mass_shell_error(state: ParticleState) -> float:
    """
    Relative deviation of E² - |p|² from the cached m².

    Zero at construction; grows with |p| drift since E is held fixed.
    """
    m2 = state.mass * state.mass
    e = state.energy
    p = state.momentum_magnitude
    return abs((e * e - p * p) - m2) / m2


def gyroradius(momentum: float, field: float, charge: float = 1.0) -> float:
    """
    Radius of circular motion R = |p| / (|q| · |B|).

    Args:
        momentum: |p| in eV/c.
        field: Field in eV/m.
        charge: Charge in units of e.
    """
    return abs(momentum) / (abs(charge) * abs(field))
