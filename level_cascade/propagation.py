"""
Probability propagation through the levels of a cascade.

Occupation is moved from every level that still has daughter lines to the
final levels of those lines, in proportion to the line rates (branching
ratios), until a round moves nothing.  Terminal levels only accumulate.

Two round types are available:

    sequential
        Levels are visited in list order and updated in place, so
        occupation deposited on a level visited later in the same round
        moves on within that round.  This is the reference behaviour;
        results depend on the level order (see ``ordering.sort_by_energy``).
    buffered
        All transfers of a round are computed from the occupations at the
        start of the round and applied together.  Independent of level
        order; needs one round per line of the longest decay path.

Both conserve the total occupation and reach the same fixed point on
acyclic graphs.
"""

from __future__ import annotations

import logging
import warnings
from typing import Sequence

import numpy as np

from .errors import NegativeRate, UnknownProcess, ZeroBranchingRate
from .graph import LevelIndex, build_level_index, find_level_index
from .levels import Level, LineRef, Process

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Mode constants
# ---------------------------------------------------------------------------

MODE_SEQUENTIAL: str = "sequential"
MODE_BUFFERED: str = "buffered"
PROPAGATION_MODES = {MODE_SEQUENTIAL, MODE_BUFFERED}


# ---------------------------------------------------------------------------
# Branching
# ---------------------------------------------------------------------------


def transition_rate(ref: LineRef) -> float:
    """Return the rate-like scalar of the line referenced by ``ref``.

    Photoionization cross sections are used as if they were rates: the
    initial levels of photoionization lines are assumed not to decay by
    photon emission or autoionization.

    Raises
    ------
    UnknownProcess
        If ``ref.process`` is not Radiative, Auger or Photo.
    """
    process = ref.process
    if process is Process.RADIATIVE:
        return float(ref.line.photon_rate)
    if process is Process.AUGER:
        return float(ref.line.total_rate)
    if process is Process.PHOTO:
        return float(ref.line.cross_section)
    raise UnknownProcess(process)


def _branches(
    level: Level,
    levels: Sequence[Level],
    index: LevelIndex,
) -> tuple[list[int], np.ndarray]:
    """Destination positions and branching ratios of a level's daughter lines.

    Raises
    ------
    UnknownProcess, LevelNotFound, NegativeRate, ZeroBranchingRate
    """
    rates = np.array([transition_rate(ref) for ref in level.daughters], dtype=np.float64)
    if np.any(rates < 0.0):
        raise NegativeRate(level.key, rates.tolist())
    destinations = [
        find_level_index(ref.line.final_level.key, levels, index) for ref in level.daughters
    ]
    total_rate = float(rates.sum())
    if total_rate == 0.0:
        raise ZeroBranchingRate(level.key, len(level.daughters))
    return destinations, rates / total_rate


# ---------------------------------------------------------------------------
# Single rounds
# ---------------------------------------------------------------------------


def propagation_round(levels: Sequence[Level], index: LevelIndex | None = None) -> float:
    """Run one sequential round over ``levels``, modifying them in place.

    Parameters
    ----------
    levels : sequence of Level
        Level graph in visiting order.
    index : dict, optional
        Identity-key index of ``levels``; built when omitted.

    Returns
    -------
    float
        Total occupation moved in this round.
    """
    if index is None:
        index = build_level_index(levels)

    total_moved = 0.0
    for level in levels:
        if level.relative_occ > 0.0 and level.daughters:
            destinations, ratios = _branches(level, levels, index)
            prob = level.relative_occ
            total_moved += prob
            level.relative_occ = 0.0
            for k, ratio in zip(destinations, ratios):
                levels[k].relative_occ += prob * float(ratio)
    return total_moved


def propagation_round_buffered(
    levels: Sequence[Level],
    index: LevelIndex | None = None,
) -> float:
    """Run one buffered round: compute all transfers first, then apply them.

    Returns
    -------
    float
        Total occupation moved in this round.
    """
    if index is None:
        index = build_level_index(levels)

    occ = np.array([level.relative_occ for level in levels], dtype=np.float64)
    incoming = np.zeros_like(occ)
    total_moved = 0.0
    sources: list[int] = []
    for i, level in enumerate(levels):
        if occ[i] > 0.0 and level.daughters:
            destinations, ratios = _branches(level, levels, index)
            np.add.at(incoming, destinations, occ[i] * ratios)
            total_moved += float(occ[i])
            sources.append(i)

    for i in sources:
        levels[i].relative_occ = 0.0
    for i in np.flatnonzero(incoming):
        levels[i].relative_occ += float(incoming[i])
    return total_moved


# ---------------------------------------------------------------------------
# Fixed point
# ---------------------------------------------------------------------------


def propagate_probability(
    levels: Sequence[Level],
    mode: str = MODE_SEQUENTIAL,
    max_rounds: int | None = None,
) -> tuple[int, np.ndarray, bool]:
    """Propagate occupation through the cascade until no round moves any.

    Parameters
    ----------
    levels : sequence of Level
        Ordered level graph with initial occupations; modified in place.
    mode : str, optional
        ``"sequential"`` (default, reference behaviour) or ``"buffered"``.
    max_rounds : int or None, optional
        Upper bound on the number of rounds.  Defaults to
        ``len(levels) + 1``, enough for any acyclic level graph.

    Returns
    -------
    rounds : int
        Number of rounds run, including the final round that moved nothing.
    moved_history : np.ndarray, shape (rounds,)
        Occupation moved in each round.
    converged : bool
        ``False`` if ``max_rounds`` was exhausted before a quiet round,
        which only happens for cyclic (malformed) level graphs.

    Raises
    ------
    ValueError
        For an unknown ``mode``.
    UnknownProcess, LevelNotFound, NegativeRate, ZeroBranchingRate
        On inconsistent cascade data; the graph is left in its
        pre-failure state of the current round.
    """
    if mode not in PROPAGATION_MODES:
        raise ValueError(f"mode must be one of {PROPAGATION_MODES}, got {mode!r}")
    if max_rounds is None:
        max_rounds = len(levels) + 1

    round_fn = propagation_round if mode == MODE_SEQUENTIAL else propagation_round_buffered
    index = build_level_index(levels)

    logger.info("Probability propagation through %d levels of the cascade (%s).", len(levels), mode)
    history: list[float] = []
    converged = False
    for n in range(1, max_rounds + 1):
        moved = round_fn(levels, index)
        history.append(moved)
        logger.debug("%d-th round has propagated a total of %.6e level occupation.", n, moved)
        if moved == 0.0:
            converged = True
            break
    else:
        warnings.warn(
            f"propagate_probability: max_rounds={max_rounds} reached while occupation "
            "was still moving. The level graph is probably cyclic.",
            RuntimeWarning,
            stacklevel=2,
        )

    return len(history), np.array(history, dtype=np.float64), converged
