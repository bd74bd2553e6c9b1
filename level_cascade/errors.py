"""
Error taxonomy for the level-cascade engine.

Every error here is fatal: the cascade data handed to the engine is
inconsistent and the enclosing pipeline run must stop.  None of them are
caught or downgraded inside the package.
"""

from __future__ import annotations

from typing import Any


class CascadeDataError(RuntimeError):
    """Base class for all inconsistencies in cascade line or level data."""


class MissingDataset(CascadeDataError):
    """Raised when no dataset in a family matches the requested selection key."""

    def __init__(self, selection_key: float | None, available: list[float] | None = None) -> None:
        self.selection_key = selection_key
        self.available = list(available or [])
        super().__init__(
            f"No photo-ionization dataset found for photon energy {selection_key!r}; "
            f"available photon energies: {self.available}"
        )


class UnknownProcess(CascadeDataError):
    """Raised when a transition's process tag is not Radiative, Auger or Photo."""

    def __init__(self, process: Any) -> None:
        self.process = process
        super().__init__(f"Unknown atomic process {process!r}; expected radiative, auger or photo.")


class LevelNotFound(CascadeDataError):
    """Raised when a level identity key is absent from a level graph."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"No level with identity key {key} found in the cascade graph.")


class ZeroBranchingRate(CascadeDataError):
    """Raised when a level has daughter lines whose rates sum to zero."""

    def __init__(self, key: Any, n_daughters: int) -> None:
        self.key = key
        self.n_daughters = n_daughters
        super().__init__(
            f"Level {key} has {n_daughters} daughter line(s) but a total rate of zero; "
            "branching ratios are undefined."
        )


class NegativeRate(CascadeDataError):
    """Raised when a daughter line of a level carries a negative rate."""

    def __init__(self, key: Any, rates: list[float]) -> None:
        self.key = key
        self.rates = list(rates)
        super().__init__(
            f"Level {key} has daughter line(s) with negative rate(s): "
            f"{[r for r in self.rates if r < 0.0]}"
        )
