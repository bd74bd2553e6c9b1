"""
Level-graph construction for the cascade engine.

A level graph is a plain ``list[Level]``: every distinct level occurs once,
carrying the lines that populate it (parents) and the lines through which
it decays (daughters).  Lookups go through a ``dict[LevelKey, int]`` index
instead of scanning the list.

NetworkX is used only for structural diagnostics (acyclicity, cascade
depth); propagation itself works on the level list.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import networkx as nx

from .errors import LevelNotFound, MissingDataset
from .levels import (
    DecayData,
    Level,
    LevelKey,
    LineRef,
    Parity,
    PhotoIonData,
    Process,
)

logger = logging.getLogger(__name__)

LevelIndex = dict[LevelKey, int]
CascadeData = Union[DecayData, PhotoIonData, Sequence[PhotoIonData]]

# Within one dataset all endpoints of a level agree on the electron count,
# so the builder unifies stubs on energy, J and parity only.
_BuilderKey = tuple[float, object, Parity]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _builder_key(level: Level) -> _BuilderKey:
    return (level.energy, level.j, level.parity)


def _sorted_by_energy(levels: Sequence[Level]) -> list[Level]:
    """Sort levels by energy, highest first; ties keep their input order."""
    return sorted(levels, key=lambda level: level.energy, reverse=True)


# ---------------------------------------------------------------------------
# Index and lookup
# ---------------------------------------------------------------------------


def build_level_index(levels: Sequence[Level]) -> LevelIndex:
    """Map every level's identity key to its position in ``levels``.

    If a key occurs more than once, the first occurrence wins.
    """
    index: LevelIndex = {}
    for i, level in enumerate(levels):
        index.setdefault(level.key, i)
    return index


def find_level_index(
    key: LevelKey,
    levels: Sequence[Level],
    index: LevelIndex | None = None,
) -> int:
    """Return the 0-based position of the level with identity ``key``.

    Parameters
    ----------
    key : LevelKey
        Identity key (energy, J, parity, electron count) to look up.
    levels : sequence of Level
        The level graph.
    index : dict, optional
        A prebuilt index for ``levels``; built on the fly when omitted.

    Raises
    ------
    LevelNotFound
        If no level in ``levels`` carries ``key``.
    """
    if index is None:
        index = build_level_index(levels)
    try:
        return index[key]
    except KeyError:
        raise LevelNotFound(key) from None


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def push_level(
    levels: list[Level],
    new_level: Level,
    index: dict[_BuilderKey, int] | None = None,
) -> Level:
    """Insert ``new_level`` into ``levels`` or merge it into its existing twin.

    If a level with the same energy, J and parity is already present, the
    parent and daughter lines of ``new_level`` are appended to it; otherwise
    ``new_level`` itself is appended.  ``levels`` (and ``index``, when given)
    are modified in place.

    Returns
    -------
    Level
        The level that now holds the edges of ``new_level``.
    """
    key = _builder_key(new_level)
    if index is None:
        position = next(
            (i for i, level in enumerate(levels) if _builder_key(level) == key), None
        )
    else:
        position = index.get(key)

    if position is not None:
        existing = levels[position]
        existing.parents.extend(new_level.parents)
        existing.daughters.extend(new_level.daughters)
        return existing

    levels.append(new_level)
    if index is not None:
        index[key] = len(levels) - 1
    return new_level


def select_dataset(
    family: Sequence[PhotoIonData],
    photon_energy: float | None,
) -> PhotoIonData:
    """Pick the member of a photo-ionization family for ``photon_energy``.

    The photon energy must match exactly; there is no nearest-energy
    fallback.

    Raises
    ------
    MissingDataset
        If ``photon_energy`` is None or no member matches it.
    """
    available = [dataset.photon_energy for dataset in family]
    if photon_energy is not None:
        for dataset in family:
            if dataset.photon_energy == float(photon_energy):
                return dataset
    raise MissingDataset(photon_energy, available)


def _extract_from_dataset(dataset: DecayData | PhotoIonData) -> list[Level]:
    if isinstance(dataset, DecayData):
        processes = (Process.RADIATIVE, Process.AUGER)
    else:
        processes = (Process.PHOTO,)

    levels: list[Level] = []
    index: dict[_BuilderKey, int] = {}
    n_lines = 0
    for process in processes:
        for i, line in enumerate(dataset.lines(process)):
            ref = LineRef(dataset, process, i)
            push_level(levels, Level.from_line_level(line.initial_level, daughters=[ref]), index)
            push_level(levels, Level.from_line_level(line.final_level, parents=[ref]), index)
            n_lines += 1

    levels = _sorted_by_energy(levels)
    logger.info(
        "Extracted %d levels from %d lines of dataset %r.", len(levels), n_lines, dataset.name
    )
    return levels


def extract_levels(data: CascadeData, photon_energy: float | None = None) -> list[Level]:
    """Build the deduplicated level graph of one line dataset.

    Parameters
    ----------
    data : DecayData, PhotoIonData or sequence of PhotoIonData
        The line dataset.  For a sequence (a family of photo-ionization
        datasets), the member matching ``photon_energy`` is used.
    photon_energy : float, optional
        Selection key for dataset families.

    Returns
    -------
    list of Level
        One level per distinct endpoint, sorted by energy in descending
        order (stable with respect to first appearance).  Each level's
        occupation is the tabulated occupation of its first endpoint.

    Raises
    ------
    MissingDataset
        If ``data`` is a family and no member matches ``photon_energy``.
    TypeError
        If ``data`` is not a recognised dataset type.
    """
    if isinstance(data, (DecayData, PhotoIonData)):
        return _extract_from_dataset(data)
    if isinstance(data, (list, tuple)) and all(isinstance(d, PhotoIonData) for d in data):
        return _extract_from_dataset(select_dataset(data, photon_energy))
    raise TypeError(f"Cannot extract levels from {type(data).__name__}.")


# ---------------------------------------------------------------------------
# Structural diagnostics
# ---------------------------------------------------------------------------


def level_digraph(levels: Sequence[Level], index: LevelIndex | None = None) -> nx.DiGraph:
    """Convert a level graph into a NetworkX DiGraph over level positions.

    Node ``i`` is ``levels[i]``; there is an edge ``i -> k`` for every
    daughter line of level ``i`` whose final level is ``levels[k]``.
    Parallel lines collapse into one edge whose ``lines`` attribute counts
    them.

    Raises
    ------
    LevelNotFound
        If a daughter line ends on a level that is not in ``levels``.
    """
    if index is None:
        index = build_level_index(levels)

    G = nx.DiGraph()
    G.add_nodes_from(range(len(levels)))
    for i, level in enumerate(levels):
        for ref in level.daughters:
            k = find_level_index(ref.line.final_level.key, levels, index)
            if G.has_edge(i, k):
                G[i][k]["lines"] += 1
            else:
                G.add_edge(i, k, lines=1)
    return G


def cascade_depth(levels: Sequence[Level]) -> int:
    """Length (in lines) of the longest decay path in the level graph.

    This bounds the number of rounds the buffered propagation needs to move
    all occupation onto terminal levels.

    Raises
    ------
    ValueError
        If the level graph contains a cycle.
    """
    G = level_digraph(levels)
    if not nx.is_directed_acyclic_graph(G):
        cycle = nx.find_cycle(G)
        raise ValueError(f"Level graph is cyclic; first cycle through positions {cycle}.")
    return int(nx.dag_longest_path_length(G))
