"""
Merging of level graphs built independently from different line datasets.

Levels are matched on the full identity key (energy, J, parity, electron
count).  Merging is purely structural: every output level starts with a
relative occupation of zero, and occupations are assigned afterwards by
``ordering.sort_by_energy``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .levels import Level, LevelKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeReport:
    """Telemetry of a single ``add_levels`` call.

    Attributes
    ----------
    total_before : int
        Number of levels in the first graph.
    newly_added : int
        Levels of the second graph with no counterpart in the first.
    modified : int
        Levels of the first graph whose edge lists grew.
    total_after : int
        Number of levels in the merged graph.
    """

    total_before: int
    newly_added: int
    modified: int
    total_after: int


def _zeroed_copy(level: Level, parents=None, daughters=None) -> Level:
    return Level(
        level.energy,
        level.j,
        level.parity,
        level.electrons,
        0.0,
        list(level.parents if parents is None else parents),
        list(level.daughters if daughters is None else daughters),
    )


def add_levels(
    levels_a: Sequence[Level],
    levels_b: Sequence[Level],
) -> tuple[list[Level], MergeReport]:
    """Merge two level graphs so that every level occurs only once.

    Levels of ``levels_a`` come first, in their original order, with the
    parent and daughter lines of their ``levels_b`` twin appended.  The
    levels of ``levels_b`` without a twin follow, in their original order.
    Neither input is modified.

    Parameters
    ----------
    levels_a, levels_b : sequence of Level
        Level graphs, each holding at most one level per identity key.

    Returns
    -------
    merged : list of Level
        New Level objects; ``relative_occ`` is 0 for all of them.
    report : MergeReport
        Counts of carried, added and modified levels.
    """
    b_index: dict[LevelKey, int] = {}
    for i, level in enumerate(levels_b):
        b_index.setdefault(level.key, i)

    consumed = [False] * len(levels_b)
    merged: list[Level] = []
    n_modified = 0

    for level_a in levels_a:
        i = b_index.get(level_a.key)
        if i is None or consumed[i]:
            merged.append(_zeroed_copy(level_a))
            continue
        consumed[i] = True
        level_b = levels_b[i]
        parents = level_a.parents + level_b.parents
        daughters = level_a.daughters + level_b.daughters
        if len(parents) > len(level_a.parents) or len(daughters) > len(level_a.daughters):
            n_modified += 1
        merged.append(_zeroed_copy(level_a, parents, daughters))

    n_new = 0
    for level_b, used in zip(levels_b, consumed):
        if not used:
            merged.append(_zeroed_copy(level_b))
            n_new += 1

    report = MergeReport(
        total_before=len(levels_a),
        newly_added=n_new,
        modified=n_modified,
        total_after=len(merged),
    )
    logger.info(
        "Append %d (new) levels to %d levels results in a total of %d levels "
        "(with %d modified levels) in the list.",
        report.newly_added, report.total_before, report.total_after, report.modified,
    )
    return merged, report


def merge_levels(graphs: Iterable[Sequence[Level]]) -> tuple[list[Level], list[MergeReport]]:
    """Fold ``add_levels`` left-to-right over any number of level graphs.

    Returns
    -------
    merged : list of Level
        The whole-cascade level graph (empty if ``graphs`` is empty).
    reports : list of MergeReport
        One report per folded graph.
    """
    merged: list[Level] = []
    reports: list[MergeReport] = []
    for levels in graphs:
        merged, report = add_levels(merged, levels)
        reports.append(report)
    return merged, reports
