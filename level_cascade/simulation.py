"""
Cascade simulation pipeline.

    line datasets -> extract_levels (per dataset) -> add_levels (fold)
                  -> sort_by_energy (+ initial occupations)
                  -> propagate_probability -> distributions

The level list is owned by one stage at a time and handed on; the line
datasets are never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import ConfigDict, SimulationSettings, settings_from_config
from .datasets import dataset_from_config
from .distributions import ion_distribution, level_distribution, total_occupation
from .graph import CascadeData, extract_levels
from .levels import Level
from .merge import MergeReport, add_levels
from .ordering import sort_by_energy
from .propagation import propagate_probability

logger = logging.getLogger(__name__)


@dataclass
class Simulation:
    """A cascade simulation: named line datasets plus settings."""

    name: str
    data: list[CascadeData]
    settings: SimulationSettings = field(default_factory=SimulationSettings)

    @classmethod
    def from_config(cls, cfg: ConfigDict, base_dir: str | Path = ".") -> "Simulation":
        """Build a simulation from a validated config dictionary."""
        return cls(
            name=str(cfg.get("name", "cascade")),
            data=[dataset_from_config(entry, base_dir) for entry in cfg["datasets"]],
            settings=settings_from_config(cfg),
        )


def build_level_tree(simulation: Simulation) -> tuple[list[Level], list[MergeReport]]:
    """Build the ordered whole-cascade level graph of a simulation.

    Every dataset is turned into its own level graph, the graphs are merged
    left to right, and the result is sorted by energy with the initial
    occupations of the settings applied.

    Raises
    ------
    MissingDataset
        If a photo-ionization family has no member for the photon energy.
    """
    settings = simulation.settings
    levels: list[Level] = []
    reports: list[MergeReport] = []
    for data in simulation.data:
        dataset_levels = extract_levels(data, settings.photon_energy)
        levels, report = add_levels(levels, dataset_levels)
        reports.append(report)

    levels = sort_by_energy(levels, settings.initial_occupations)
    return levels, reports


def simulate_level_distribution(
    levels: list[Level],
    simulation: Simulation,
) -> dict[str, Any]:
    """Propagate the occupation of ``levels`` and derive requested properties.

    ``levels`` is modified in place.
    """
    settings = simulation.settings
    occ_before = total_occupation(levels)
    rounds, moved, converged = propagate_probability(
        levels, mode=settings.propagation_mode, max_rounds=settings.max_rounds
    )
    occ_after = total_occupation(levels)
    logger.info(
        "Propagation finished after %d rounds; total occupation %.10f -> %.10f.",
        rounds, occ_before, occ_after,
    )

    results: dict[str, Any] = {
        "rounds": rounds,
        "moved": moved,
        "converged": converged,
        "total_occupation": occ_after,
    }
    if "ion_distribution" in settings.properties:
        results["ion_distribution"] = ion_distribution(levels)
    if "level_distribution" in settings.properties:
        results["level_distribution"] = level_distribution(levels)
    return results


def perform(simulation: Simulation) -> dict[str, Any]:
    """Run the full cascade simulation.

    Returns
    -------
    dict
        ``levels`` (final ordered level list), ``merge_reports``, and the
        entries of ``simulate_level_distribution``.
    """
    levels, reports = build_level_tree(simulation)
    results = simulate_level_distribution(levels, simulation)
    results["levels"] = levels
    results["merge_reports"] = reports
    return results
