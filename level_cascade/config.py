"""
Configuration loader for the level-cascade engine.

Loads JSON (or YAML) simulation files, validates their structure and turns
the ``settings`` section into a ``SimulationSettings`` value that is passed
explicitly through the pipeline.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .datasets import DATASET_KINDS
from .propagation import MODE_SEQUENTIAL, PROPAGATION_MODES

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

ConfigDict = dict[str, Any]


# ---------------------------------------------------------------------------
# Schema constants
# ---------------------------------------------------------------------------

PROPERTIES = {"ion_distribution", "level_distribution"}


@dataclass(frozen=True)
class SimulationSettings:
    """Settings of one cascade simulation.

    Attributes
    ----------
    initial_occupations : tuple of (int, float)
        ``(position, occupation)`` pairs; positions are 1-based in the
        energy-sorted level list.
    photon_energy : float or None
        Selection key for photo-ionization dataset families.
    propagation_mode : str
        ``"sequential"`` or ``"buffered"``.
    max_rounds : int or None
        Round bound for the propagation; None for the default.
    properties : frozenset of str
        Distributions to derive after propagation.
    """

    initial_occupations: tuple[tuple[int, float], ...] = ()
    photon_energy: float | None = None
    propagation_mode: str = MODE_SEQUENTIAL
    max_rounds: int | None = None
    properties: frozenset[str] = field(default_factory=lambda: frozenset(PROPERTIES))


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def load_config(path: str | Path) -> ConfigDict:
    """Load and validate a JSON or YAML simulation file.

    Parameters
    ----------
    path : str or Path
        Path to a ``.json``, ``.yaml`` or ``.yml`` file.

    Returns
    -------
    ConfigDict
        Validated configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If the config file does not exist.
    ValueError
        If the format is unsupported, required fields are missing or values
        are invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r") as fh:
        if suffix in (".yaml", ".yml"):
            cfg: ConfigDict = yaml.safe_load(fh)
        elif suffix == ".json":
            cfg = json.load(fh)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}. Use .json, .yaml or .yml")

    if not isinstance(cfg, dict):
        raise ValueError(f"Config {path} must contain a mapping at top level.")
    _validate_config(cfg)
    logger.info("Loaded configuration from %s", path)
    return cfg


def _validate_config(cfg: ConfigDict) -> None:
    """Validate top-level config fields.

    Raises
    ------
    ValueError
        On any validation failure.
    """
    required_top = {"settings", "datasets"}
    missing = required_top - cfg.keys()
    if missing:
        raise ValueError(f"Config missing required fields: {missing}")

    datasets = cfg["datasets"]
    if not isinstance(datasets, list) or not datasets:
        raise ValueError("datasets must be a non-empty list")
    for i, entry in enumerate(datasets):
        if not isinstance(entry, dict) or "kind" not in entry:
            raise ValueError(f"datasets[{i}].kind is required")
        if entry["kind"] not in DATASET_KINDS:
            raise ValueError(
                f"datasets[{i}].kind must be one of {DATASET_KINDS}, got {entry['kind']!r}"
            )

    _validate_settings(cfg["settings"])


def _validate_settings(settings: ConfigDict) -> None:
    if not isinstance(settings, dict):
        raise ValueError(f"settings must be a mapping, got {type(settings).__name__}")
    if "initial_occupations" not in settings:
        raise ValueError("settings.initial_occupations is required")

    for pair in settings["initial_occupations"]:
        if len(pair) != 2:
            raise ValueError(f"initial occupation {pair!r} must be a [position, occupation] pair")
        position, occupation = pair
        if int(position) != position or int(position) < 1:
            raise ValueError(f"initial occupation position must be an integer >= 1, got {position!r}")
        if not 0.0 <= float(occupation) <= 1.0:
            raise ValueError(f"initial occupation must lie in [0, 1], got {occupation!r}")

    mode = settings.get("propagation_mode", MODE_SEQUENTIAL)
    if mode not in PROPAGATION_MODES:
        raise ValueError(f"propagation_mode must be one of {PROPAGATION_MODES}, got {mode!r}")

    max_rounds = settings.get("max_rounds")
    if max_rounds is not None and int(max_rounds) < 1:
        raise ValueError(f"max_rounds must be >= 1, got {max_rounds!r}")

    unknown = set(settings.get("properties", [])) - PROPERTIES
    if unknown:
        raise ValueError(f"properties must be drawn from {PROPERTIES}, got unknown {unknown}")


def settings_from_config(cfg: ConfigDict) -> SimulationSettings:
    """Build ``SimulationSettings`` from a validated config dictionary."""
    s = cfg["settings"]
    photon_energy = s.get("photon_energy")
    max_rounds = s.get("max_rounds")
    return SimulationSettings(
        initial_occupations=tuple(
            (int(position), float(occupation)) for position, occupation in s["initial_occupations"]
        ),
        photon_energy=None if photon_energy is None else float(photon_energy),
        propagation_mode=str(s.get("propagation_mode", MODE_SEQUENTIAL)),
        max_rounds=None if max_rounds is None else int(max_rounds),
        properties=frozenset(s.get("properties", PROPERTIES)),
    )
