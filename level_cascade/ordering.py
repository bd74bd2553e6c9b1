"""
Canonical ordering of a level graph and binding of initial occupations.

Initial occupations from settings files address levels by their 1-based
position in the energy-sorted list, so the sort order (energy descending,
ties in input order) is part of the contract with the caller.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .graph import build_level_index, find_level_index
from .levels import Level, LevelKey

logger = logging.getLogger(__name__)


def sort_by_energy(
    levels: Sequence[Level],
    initial_occupations: Sequence[tuple[int, float]] = (),
) -> list[Level]:
    """Sort levels by energy and assign initial occupations by position.

    Parameters
    ----------
    levels : sequence of Level
        Level graph, typically the output of ``merge.merge_levels``.
    initial_occupations : sequence of (int, float)
        ``(position, occupation)`` pairs; ``position`` is 1-based in the
        sorted order returned by this function.

    Returns
    -------
    list of Level
        The same Level objects, highest energy first (stable for equal
        energies).  Addressed levels have their ``relative_occ``
        overwritten; all others keep theirs.

    Raises
    ------
    ValueError
        If a position lies outside ``1..len(levels)``.  No occupation is
        written in that case.
    """
    ordered = sorted(levels, key=lambda level: level.energy, reverse=True)

    n = len(ordered)
    for position, _ in initial_occupations:
        if not 1 <= int(position) <= n:
            raise ValueError(
                f"Initial occupation refers to level {position}, but the cascade "
                f"has levels 1..{n} only."
            )
    for position, occupation in initial_occupations:
        ordered[int(position) - 1].relative_occ = float(occupation)

    logger.info(
        "Sort and assign occupation to a total of %d levels, to which all level "
        "numbers refer below.", n,
    )
    return ordered


def assign_occupations_by_key(
    levels: Sequence[Level],
    occupations: Mapping[LevelKey, float],
) -> None:
    """Assign initial occupations to levels addressed by identity key.

    Unlike positional binding this does not depend on the level order.

    Raises
    ------
    LevelNotFound
        If a key is absent from ``levels``.  No occupation is written in
        that case.
    """
    index = build_level_index(levels)
    positions = {key: find_level_index(key, levels, index) for key in occupations}
    for key, occupation in occupations.items():
        levels[positions[key]].relative_occ = float(occupation)
