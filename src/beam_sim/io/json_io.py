# MIT License (see LICENSE)
"""
Reading and writing run setups, field maps and outcome tables.

Setups are JSON so they can be edited by hand; field maps and outcome
tables are numeric arrays and go to numpy ``.npz`` archives.

Setup JSON schema:
------------------
{
  "dtau": float,                 # Proper-time step (m), required
  "tau_final": float,            # Proper-time limit (m), required
  "edge_margin": float,          # Default: 0.005
  "length_unit": float,          # Metres per map unit, default: 0.01
  "field_unit": float,           # eV/m per map value, default: 1 mT
  "charge": float,               # Units of e, default: -1
  "rest_mass": float,            # eV, default: 511e3
  "max_steps": int,              # Optional iteration cap
  "absorbers": [                 # Ordered, first match wins
    {
      "x1": float, "x2": float,  # World units (m)
      "y1": float, "y2": float,
      "tag": int,                # Default: 0 (collimator)
      "name": string             # Optional
    }
  ]
}

Field map archive: ``values`` (width × height), ``x_range`` and ``y_range``.
Outcome archive: ``final_energy`` and ``outcome_tag`` columns.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Iterable

import numpy as np

from ..absorbers import AbsorberRegion
from ..analysis import OUTCOME_DTYPE, outcome_table
from ..config import DEFAULT_MAX_STEPS, SimulationConfig
from ..errors import InvalidConfiguration
from ..field import FieldGrid
from ..types import Outcome

logger = logging.getLogger(__name__)


# =============================================================================
# Setup (configuration surface)
# =============================================================================

def load_setup_raw(path: str) -> dict[str, Any]:
    """Load raw JSON data from a setup file without object construction."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_setup(path: str) -> SimulationConfig:
    """
    Load and validate a SimulationConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        InvalidConfiguration: If required keys are missing or values are
                              out of range.
    """
    config = config_from_json(load_setup_raw(path))
    logger.debug("loaded setup from %s with %d absorbers", path, len(config.absorbers))
    return config


def config_from_json(d: dict[str, Any]) -> SimulationConfig:
    """Build and validate a SimulationConfig from a parsed setup dictionary."""
    for key in ("dtau", "tau_final"):
        if key not in d:
            raise InvalidConfiguration(f"Setup missing required '{key}' field.")

    defaults = SimulationConfig()
    config = SimulationConfig(
        dtau=float(d["dtau"]),
        tau_final=float(d["tau_final"]),
        edge_margin=float(d.get("edge_margin", defaults.edge_margin)),
        length_unit=float(d.get("length_unit", defaults.length_unit)),
        field_unit=float(d.get("field_unit", defaults.field_unit)),
        charge=float(d.get("charge", defaults.charge)),
        rest_mass=float(d.get("rest_mass", defaults.rest_mass)),
        absorbers=[absorber_from_json(a) for a in d.get("absorbers", [])],
        max_steps=int(d.get("max_steps", DEFAULT_MAX_STEPS)),
    )
    config.validate()
    return config


def absorber_from_json(d: dict[str, Any]) -> AbsorberRegion:
    """Parse a single absorber definition."""
    missing = [k for k in ("x1", "x2", "y1", "y2") if k not in d]
    if missing:
        raise InvalidConfiguration(f"Absorber definition missing {missing}")
    return AbsorberRegion(
        x1=float(d["x1"]),
        x2=float(d["x2"]),
        y1=float(d["y1"]),
        y2=float(d["y2"]),
        tag=int(d.get("tag", 0)),
        name=str(d.get("name", "")),
    )


def absorber_to_json(region: AbsorberRegion) -> dict[str, Any]:
    """Serialize an absorber; hooks are not serialized."""
    result: dict[str, Any] = {
        "x1": region.x1, "x2": region.x2,
        "y1": region.y1, "y2": region.y2,
        "tag": int(region.tag),
    }
    if region.name:
        result["name"] = region.name
    return result


def setup_to_json(config: SimulationConfig) -> dict[str, Any]:
    """Serialize a SimulationConfig to a dictionary (round-trip compatible)."""
    result = {
        "dtau": config.dtau,
        "tau_final": config.tau_final,
        "edge_margin": config.edge_margin,
        "length_unit": config.length_unit,
        "field_unit": config.field_unit,
        "charge": config.charge,
        "rest_mass": config.rest_mass,
        "absorbers": [absorber_to_json(a) for a in config.absorbers],
    }
    if config.max_steps != DEFAULT_MAX_STEPS:
        result["max_steps"] = config.max_steps
    return result


def save_setup(config: SimulationConfig, path: str, indent: int = 2) -> None:
    """Save a SimulationConfig to a JSON file on disk."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(setup_to_json(config), f, indent=indent)
    logger.debug("saved setup to %s", path)


# =============================================================================
# Field maps
# =============================================================================

def save_field_grid(grid: FieldGrid, path: str) -> None:
    """Write a FieldGrid to an ``.npz`` archive."""
    np.savez(
        path,
        values=np.asarray(grid.values),
        x_range=np.array([grid.xmin, grid.xmax]),
        y_range=np.array([grid.ymin, grid.ymax]),
    )
    logger.debug("saved %dx%d field grid to %s", grid.width, grid.height, path)


def load_field_grid(path: str) -> FieldGrid:
    """
    Read a FieldGrid from an ``.npz`` archive.

    Raises:
        InvalidConfiguration: If an array is missing or malformed.
    """
    with np.load(path) as data:
        missing = [k for k in ("values", "x_range", "y_range") if k not in data.files]
        if missing:
            raise InvalidConfiguration(f"Field archive {path} missing {missing}")
        values = data["values"]
        x_range = data["x_range"]
        y_range = data["y_range"]
    grid = FieldGrid(values, float(x_range[0]), float(x_range[1]), float(y_range[0]), float(y_range[1]))
    logger.debug("loaded %dx%d field grid from %s", grid.width, grid.height, path)
    return grid


# =============================================================================
# Outcome tables
# =============================================================================

def save_outcomes(outcomes: Iterable[Outcome], path: str) -> int:
    """
    Write (final_energy, outcome_tag) columns to an ``.npz`` archive.

    Returns:
        Number of rows written.
    """
    table = outcome_table(outcomes)
    np.savez(path, final_energy=table["final_energy"], outcome_tag=table["outcome_tag"])
    logger.debug("saved %d outcomes to %s", len(table), path)
    return len(table)


def load_outcomes(path: str) -> np.ndarray:
    """Read an outcome archive back as a structured array (see analysis.OUTCOME_DTYPE)."""
    with np.load(path) as data:
        energy = data["final_energy"]
        tag = data["outcome_tag"]
    table = np.empty(len(energy), dtype=OUTCOME_DTYPE)
    table["final_energy"] = energy
    table["outcome_tag"] = tag
    return table
