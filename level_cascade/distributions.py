"""
Ion and level distributions derived from a converged level graph.

All functions are pure: they read ``relative_occ`` and the level quantum
numbers and return plain Python containers, leaving rendering to callers.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .levels import Level, level_symmetry


# ---------------------------------------------------------------------------
# Energy units
# ---------------------------------------------------------------------------

# CODATA 2018
HARTREE_TO_EV: float = 27.211386245988
HARTREE_TO_KAYSER: float = 219474.6313632

ENERGY_UNITS: dict[str, float] = {
    "hartree": 1.0,
    "ev": HARTREE_TO_EV,
    "kayser": HARTREE_TO_KAYSER,
}


def convert_energy(energy: float, unit: str = "eV") -> float:
    """Convert an energy from Hartree into ``unit`` (Hartree, eV or Kayser)."""
    try:
        factor = ENERGY_UNITS[unit.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported energy unit {unit!r}; use one of {sorted(ENERGY_UNITS)}."
        ) from None
    return energy * factor


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------


def total_occupation(levels: Sequence[Level]) -> float:
    """Sum of ``relative_occ`` over all levels."""
    return float(np.sum([level.relative_occ for level in levels], dtype=np.float64))


def ion_distribution(levels: Sequence[Level]) -> dict[int, float]:
    """Occupation summed by electron count.

    Returns
    -------
    dict
        ``{n_electrons: occupation}`` for every electron count between the
        smallest and largest present, ordered from most to fewest
        electrons.  Counts with no level map to 0.0.
    """
    if not levels:
        return {}
    counts = [level.electrons for level in levels]
    occ = np.array([level.relative_occ for level in levels], dtype=np.float64)
    counts_arr = np.array(counts, dtype=np.int64)
    return {
        n: float(occ[counts_arr == n].sum())
        for n in range(max(counts), min(counts) - 1, -1)
    }


def level_distribution(
    levels: Sequence[Level],
    energy_unit: str = "eV",
    nonzero_only: bool = True,
) -> list[dict]:
    """Per-level occupations, grouped by electron count.

    Parameters
    ----------
    levels : sequence of Level
        Ordered level graph; ``level_no`` refers to the 1-based position
        in this order.
    energy_unit : str, optional
        Unit for the ``energy`` field.  Default eV.
    nonzero_only : bool, optional
        Drop levels with zero occupation.  Default True.

    Returns
    -------
    list of dict
        Records with keys ``electrons``, ``level_no``, ``symmetry``,
        ``energy`` and ``relative_occ``, ordered by electron count
        (descending) and then by energy (descending).
    """
    order = sorted(
        range(len(levels)),
        key=lambda i: (-levels[i].electrons, -levels[i].energy),
    )
    records = []
    for i in order:
        level = levels[i]
        if nonzero_only and level.relative_occ == 0.0:
            continue
        records.append({
            "electrons": level.electrons,
            "level_no": i + 1,
            "symmetry": level.symmetry,
            "energy": convert_energy(level.energy, energy_unit),
            "relative_occ": level.relative_occ,
        })
    return records


def _endpoint_summary(ref, endpoint: str, energy_unit: str) -> dict:
    lev = getattr(ref.line, endpoint)
    return {
        "process": ref.process.value,
        "electrons": lev.electrons,
        "symmetry": level_symmetry(lev.j, lev.parity),
        "energy": convert_energy(lev.energy, energy_unit),
    }


def level_tree(levels: Sequence[Level], energy_unit: str = "eV") -> list[dict]:
    """Every level with summaries of its parent and daughter lines.

    Parent entries describe the initial level of each populating line and
    daughter entries the final level of each decay line, which makes
    missing links in the cascade data visible.
    """
    return [
        {
            "level_no": i + 1,
            "electrons": level.electrons,
            "symmetry": level.symmetry,
            "energy": convert_energy(level.energy, energy_unit),
            "relative_occ": level.relative_occ,
            "parents": [_endpoint_summary(p, "initial_level", energy_unit) for p in level.parents],
            "daughters": [_endpoint_summary(d, "final_level", energy_unit) for d in level.daughters],
        }
        for i, level in enumerate(levels)
    ]
