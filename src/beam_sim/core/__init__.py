# MIT License (see LICENSE)
"""
Core integration components.

This subpackage provides:
    - Force law: Lorentz force on the momentum four-vector in proper time.
    - Integrator: Fixed-step classical RK4.
    - Invariants: Momentum drift, mass-shell error and gyroradius.

Typical usage:
    from beam_sim.core import rk4_step

    rk4_step(state, dtau=3e-4, field=sampler)
"""
from .forces import lorentz_dp, lorentz_dx
from .integrators import rk4_step
from .invariants import momentum_drift, mass_shell_error, gyroradius

__all__ = [
    # Forces
    "lorentz_dp",
    "lorentz_dx",
    # Integrators
    "rk4_step",
    # Invariants
    "momentum_drift",
    "mass_shell_error",
    "gyroradius",
]
