# MIT License (see LICENSE)
"""
Exception types raised by the simulation.

All errors are local and deterministic: re-running a particle with the same
inputs reproduces the same failure, so nothing here is retried.
"""
from __future__ import annotations


class BeamSimError(Exception):
    """Base class for all beam_sim errors."""


class InvalidConfiguration(BeamSimError, ValueError):
    """
    A simulation parameter is out of range.

    Raised for non-positive rest mass, dτ ≥ τ_final, absorber bounds with
    x1 > x2 or y1 > y2, malformed field grids and incomplete setup files.
    """


class InvalidFieldDomain(BeamSimError, ValueError):
    """
    The field was sampled outside its grid.

    The field sampler refuses to extrapolate. The simulator catches this
    when an RK4 stage reaches past the map edge and ends the particle as a
    boundary escape.
    """


class NonTerminatingSimulation(BeamSimError, RuntimeError):
    """The iteration cap was reached before any termination condition fired."""
