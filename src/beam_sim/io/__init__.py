# MIT License (see LICENSE)
"""
Input/Output utilities.

This subpackage provides:
    - Setup JSON: Save and load a SimulationConfig (units, steps, absorbers).
    - Field maps: Save and load FieldGrid arrays as ``.npz``.
    - Outcome tables: Export (final_energy, outcome_tag) rows as ``.npz``.

Typical usage:
    from beam_sim.io import load_setup, load_field_grid

    config = load_setup("spectrometer.json")
    grid = load_field_grid("mfield.npz")
"""
from .json_io import (
    load_setup,
    load_setup_raw,
    save_setup,
    setup_to_json,
    config_from_json,
    absorber_to_json,
    absorber_from_json,
    load_field_grid,
    save_field_grid,
    load_outcomes,
    save_outcomes,
)

__all__ = [
    # Setup
    "load_setup",
    "load_setup_raw",
    "save_setup",
    "setup_to_json",
    "config_from_json",
    "absorber_to_json",
    "absorber_from_json",
    # Field maps
    "load_field_grid",
    "save_field_grid",
    # Outcomes
    "load_outcomes",
    "save_outcomes",
]
