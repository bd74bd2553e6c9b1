"""
level_cascade: Level-Graph Probability Propagation for Atomic Cascades
========================================================================

Builds a deduplicated graph of atomic levels from radiative, Auger and
photoionization line data, merges the graphs of several datasets, orders
the levels by energy and propagates an initial occupation through the
cascade until it rests on terminal levels.

Quick start
-----------
>>> from level_cascade import (
...     DecayData, LineLevel, RadiativeLine, extract_levels, merge_levels,
...     sort_by_energy, propagate_probability, ion_distribution,
... )
>>> upper = LineLevel(-1.0, "1/2", "-", 2)
>>> lower = LineLevel(-2.0, "1/2", "+", 2)
>>> data = DecayData("demo", radiative=[RadiativeLine(upper, lower, 1.0e9)])
>>> levels, _ = merge_levels([extract_levels(data)])
>>> levels = sort_by_energy(levels, [(1, 1.0)])
>>> rounds, moved, converged = propagate_probability(levels)
>>> ion_distribution(levels)
{2: 1.0}
"""

from .errors import (
    CascadeDataError,
    MissingDataset,
    UnknownProcess,
    LevelNotFound,
    ZeroBranchingRate,
    NegativeRate,
)
from .levels import (
    Parity,
    Process,
    LevelKey,
    Level,
    LineLevel,
    RadiativeLine,
    AugerLine,
    PhotoLine,
    LineRef,
    DecayData,
    PhotoIonData,
    parse_j,
)
from .graph import (
    push_level,
    extract_levels,
    select_dataset,
    build_level_index,
    find_level_index,
    level_digraph,
    cascade_depth,
)
from .merge import add_levels, merge_levels, MergeReport
from .ordering import sort_by_energy, assign_occupations_by_key
from .propagation import (
    transition_rate,
    propagation_round,
    propagation_round_buffered,
    propagate_probability,
    MODE_SEQUENTIAL,
    MODE_BUFFERED,
)
from .distributions import total_occupation, ion_distribution, level_distribution, level_tree
from .config import SimulationSettings, load_config, settings_from_config
from .simulation import Simulation, build_level_tree, simulate_level_distribution, perform

__all__ = [
    # errors
    "CascadeDataError", "MissingDataset", "UnknownProcess", "LevelNotFound",
    "ZeroBranchingRate", "NegativeRate",
    # data model
    "Parity", "Process", "LevelKey", "Level", "LineLevel", "RadiativeLine",
    "AugerLine", "PhotoLine", "LineRef", "DecayData", "PhotoIonData", "parse_j",
    # graph
    "push_level", "extract_levels", "select_dataset", "build_level_index",
    "find_level_index", "level_digraph", "cascade_depth",
    # merge
    "add_levels", "merge_levels", "MergeReport",
    # ordering
    "sort_by_energy", "assign_occupations_by_key",
    # propagation
    "transition_rate", "propagation_round", "propagation_round_buffered",
    "propagate_probability", "MODE_SEQUENTIAL", "MODE_BUFFERED",
    # distributions
    "total_occupation", "ion_distribution", "level_distribution", "level_tree",
    # config / simulation
    "SimulationSettings", "load_config", "settings_from_config",
    "Simulation", "build_level_tree", "simulate_level_distribution", "perform",
]
