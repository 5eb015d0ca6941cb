# MIT License (see LICENSE)
"""
Fixed-step Runge-Kutta integration of a charged particle in proper time.

Solves the coupled system
    dx/dτ = p / m
    dp/dτ = q · B(x) · (p_y, -p_x, 0, 0) / m

with the classical 4-stage RK4 scheme and a constant, externally supplied
step dτ. There is no adaptive step control and no renormalisation of |p|;
any drift in the momentum magnitude is integration error and is left alone.

Reference:
    Runge-Kutta methods: https://en.wikipedia.org/wiki/Runge-Kutta_methods
"""
from __future__ import annotations

import numpy as np

from ..types import ParticleState
from .forces import lorentz_dp, lorentz_dx


def _increments(
    field,
    x: np.ndarray,
    p: np.ndarray,
    charge: float,
    mass: float,
    dtau: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Position and momentum increments (dx, dp) over one step at a stage point.

    dx depends only on the stage momentum; dp needs one field sample at the
    stage position.
    """
    dx = lorentz_dx(p, mass) * dtau
    dp = lorentz_dp(field, x, p, charge, mass) * dtau
    return dx, dp


def rk4_step(state: ParticleState, dtau: float, field) -> None:
    """
    Advance ``state`` by one proper-time step using classical RK4.

    Each stage evaluates the field once, at an intermediate position, and
    the four stage increments are combined with weights (1, 2, 2, 1)/6
    separately for position and momentum:

        dx1, dp1 = f(x,          p)
        dx2, dp2 = f(x + dx1/2,  p + dp1/2)
        dx3, dp3 = f(x + dx2/2,  p + dp2/2)
        dx4, dp4 = f(x + dx3,    p + dp3)

    Args:
        state: Particle to integrate (position and momentum modified in-place).
        dtau: Proper-time step in metres.
        field: Field source (see field.FieldSource).

    Note:
        step_index and tau are left to the caller. The rest mass used as the
        divisor is ``state.mass``, fixed at construction.

    Raises:
        InvalidFieldDomain: If any stage position falls off the field map.
    """
    q, m = state.charge, state.mass
    x0 = state.position
    p0 = state.momentum

    dx1, dp1 = _increments(field, x0, p0, q, m, dtau)
    dx2, dp2 = _increments(field, x0 + 0.5 * dx1, p0 + 0.5 * dp1, q, m, dtau)
    dx3, dp3 = _increments(field, x0 + 0.5 * dx2, p0 + 0.5 * dp2, q, m, dtau)
    dx4, dp4 = _increments(field, x0 + dx3, p0 + dp3, q, m, dtau)

    state.position = x0 + (dx1 + 2 * dx2 + 2 * dx3 + dx4) / 6.0
    state.momentum = p0 + (dp1 + 2 * dp2 + 2 * dp3 + dp4) / 6.0
