# MIT License (see LICENSE)
"""
Physical constants and unit conventions used throughout the simulation.

Natural-ish units are used everywhere:
  - lengths and proper time are in metres (time is multiplied by c),
  - energies, masses and momenta are in eV (momentum in eV/c),
  - magnetic fields are in eV/m, so that q·B·v directly gives dp/dτ in eV/m.

With these conventions one Tesla corresponds to c eV/m, and a particle of
unit charge with momentum p [eV] in a field B [eV/m] moves on a circle of
radius R = p / B [m].
"""
from __future__ import annotations
from dataclasses import dataclass

# Speed of light, rounded the way the spectrometer analysis uses it.
# Value: 3 × 10⁸ m/s
C_LIGHT: float = 3.0e8

# One Tesla expressed in eV/m (e · c · 1 T = c eV/m for unit charge).
TESLA: float = C_LIGHT

# One second of proper time expressed in metres.
SECOND: float = C_LIGHT


@dataclass(frozen=True)
class Units:
    """
    SI prefixes as plain multipliers.

    Attributes are named after the prefix symbol, e.g. ``unit.M`` is 10⁶ and
    ``unit.c`` is 10⁻² (centi), so ``5 * unit.c`` is 5 cm in metres.
    """
    n: float = 1e-9
    micro: float = 1e-6
    m: float = 1e-3
    c: float = 1e-2
    k: float = 1e3
    M: float = 1e6
    G: float = 1e9


unit = Units()

# Electron rest mass in eV (511 keV).
ELECTRON_MASS: float = 511 * unit.k

# Electron charge in units of e.
ELECTRON_CHARGE: float = -1.0
