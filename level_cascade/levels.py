"""
Data model for the level cascade: levels, line records and line datasets.

A level is identified by its energy (Hartree), total angular momentum J,
parity and number of electrons.  Line datasets are immutable arenas of
transition records; levels refer to them through ``LineRef`` values
(dataset, process, index) rather than owning the records.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Union

from .errors import UnknownProcess


# ---------------------------------------------------------------------------
# Quantum numbers
# ---------------------------------------------------------------------------


class Parity(enum.Enum):
    EVEN = "+"
    ODD = "-"

    @classmethod
    def parse(cls, value: "Parity | str") -> "Parity":
        """Parse ``+``/``-``/``even``/``odd`` (case-insensitive) into a Parity."""
        if isinstance(value, Parity):
            return value
        token = str(value).strip().lower()
        if token in ("+", "even", "e"):
            return cls.EVEN
        if token in ("-", "odd", "o"):
            return cls.ODD
        raise ValueError(f"Invalid parity {value!r}; expected '+', '-', 'even' or 'odd'.")

    def __str__(self) -> str:
        return self.value


JValue = Union[Fraction, int, float, str]


def parse_j(value: JValue) -> Fraction:
    """Convert a total angular momentum into an exact half-integer Fraction.

    Parameters
    ----------
    value : Fraction, int, float or str
        J as a number or a string such as ``"3/2"``.

    Returns
    -------
    Fraction
        J with denominator 1 or 2.

    Raises
    ------
    ValueError
        If J is negative or not an integer multiple of 1/2.
    """
    try:
        j = Fraction(str(value).strip()) if isinstance(value, str) else Fraction(value)
    except (ValueError, ZeroDivisionError) as exc:
        raise ValueError(f"Invalid angular momentum J={value!r}.") from exc
    if j < 0 or (2 * j).denominator != 1:
        raise ValueError(f"J must be a non-negative half-integer; got {value!r}.")
    return j


def level_symmetry(j: Fraction, parity: Parity) -> str:
    """Return the ``J^P`` label of a level, e.g. ``3/2-``."""
    return f"{j}{parity.value}"


# ---------------------------------------------------------------------------
# Processes
# ---------------------------------------------------------------------------


class Process(enum.Enum):
    RADIATIVE = "radiative"
    AUGER = "auger"
    PHOTO = "photo"

    @classmethod
    def parse(cls, value: "Process | str") -> "Process":
        """Parse a process tag; unknown tags raise ``UnknownProcess``."""
        if isinstance(value, Process):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownProcess(value) from None


# ---------------------------------------------------------------------------
# Identity key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LevelKey:
    """Hashable identity of a level within a cascade graph."""

    energy: float
    j: Fraction
    parity: Parity
    electrons: int

    def __str__(self) -> str:
        return (
            f"(E={self.energy!r} Hartree, J^P={level_symmetry(self.j, self.parity)}, "
            f"N_e={self.electrons})"
        )


# ---------------------------------------------------------------------------
# Line records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineLevel:
    """Endpoint of a transition as tabulated by the line producer.

    ``relative_occ`` is the occupation the producer attached to the level;
    it seeds the level stubs built from the line.
    """

    energy: float
    j: Fraction
    parity: Parity
    electrons: int
    relative_occ: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "energy", float(self.energy))
        object.__setattr__(self, "j", parse_j(self.j))
        object.__setattr__(self, "parity", Parity.parse(self.parity))
        object.__setattr__(self, "electrons", int(self.electrons))
        object.__setattr__(self, "relative_occ", float(self.relative_occ))

    @property
    def key(self) -> LevelKey:
        return LevelKey(self.energy, self.j, self.parity, self.electrons)


@dataclass(frozen=True)
class RadiativeLine:
    initial_level: LineLevel
    final_level: LineLevel
    photon_rate: float

    process = Process.RADIATIVE


@dataclass(frozen=True)
class AugerLine:
    initial_level: LineLevel
    final_level: LineLevel
    total_rate: float

    process = Process.AUGER


@dataclass(frozen=True)
class PhotoLine:
    """Photoionization line; ``cross_section`` is used as a branching rate."""

    initial_level: LineLevel
    final_level: LineLevel
    cross_section: float
    photon_energy: float = 0.0

    process = Process.PHOTO


Line = Union[RadiativeLine, AugerLine, PhotoLine]


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class LineDataset:
    """Arena of line records with stable indices.

    Datasets compare by identity: two datasets holding equal records are
    still different producers, and their ``LineRef`` values must differ.
    """

    name: str

    def lines(self, process: Process) -> tuple[Line, ...]:
        return ()


@dataclass(eq=False)
class DecayData(LineDataset):
    """Radiative and Auger decay lines of one cascade block."""

    radiative: tuple[RadiativeLine, ...] = ()
    auger: tuple[AugerLine, ...] = ()

    def __post_init__(self) -> None:
        self.radiative = tuple(self.radiative)
        self.auger = tuple(self.auger)

    def lines(self, process: Process) -> tuple[Line, ...]:
        if process is Process.RADIATIVE:
            return self.radiative
        if process is Process.AUGER:
            return self.auger
        return ()


@dataclass(eq=False)
class PhotoIonData(LineDataset):
    """Photoionization lines for a single incident photon energy."""

    photon_energy: float = 0.0
    photo: tuple[PhotoLine, ...] = ()

    def __post_init__(self) -> None:
        self.photon_energy = float(self.photon_energy)
        self.photo = tuple(self.photo)

    def lines(self, process: Process) -> tuple[Line, ...]:
        if process is Process.PHOTO:
            return self.photo
        return ()


@dataclass(frozen=True)
class LineRef:
    """Lookup key of a transition inside a line dataset."""

    dataset: LineDataset
    process: Process
    index: int

    @property
    def line(self) -> Line:
        """Resolve the referenced record; raises ``UnknownProcess`` for a bad tag."""
        return self.dataset.lines(Process.parse(self.process))[self.index]

    def __repr__(self) -> str:
        process = getattr(self.process, "value", self.process)
        return f"LineRef({self.dataset.name!r}, {process}, {self.index})"


# ---------------------------------------------------------------------------
# Level
# ---------------------------------------------------------------------------


@dataclass
class Level:
    """A node of the cascade graph.

    Attributes
    ----------
    energy : float
        Level energy in Hartree.
    j : Fraction
        Total angular momentum.
    parity : Parity
    electrons : int
        Number of electrons of the ion the level belongs to.
    relative_occ : float
        Fraction of the total population currently on this level.
    parents : list of LineRef
        Lines that populate this level.
    daughters : list of LineRef
        Lines through which this level decays or is ionized.
    """

    energy: float
    j: Fraction
    parity: Parity
    electrons: int
    relative_occ: float = 0.0
    parents: list[LineRef] = field(default_factory=list)
    daughters: list[LineRef] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.energy = float(self.energy)
        self.j = parse_j(self.j)
        self.parity = Parity.parse(self.parity)
        self.electrons = int(self.electrons)
        self.relative_occ = float(self.relative_occ)

    @property
    def key(self) -> LevelKey:
        return LevelKey(self.energy, self.j, self.parity, self.electrons)

    @property
    def symmetry(self) -> str:
        return level_symmetry(self.j, self.parity)

    @property
    def is_terminal(self) -> bool:
        return not self.daughters

    @classmethod
    def from_line_level(
        cls,
        line_level: LineLevel,
        parents: list[LineRef] | None = None,
        daughters: list[LineRef] | None = None,
    ) -> "Level":
        return cls(
            line_level.energy,
            line_level.j,
            line_level.parity,
            line_level.electrons,
            line_level.relative_occ,
            list(parents or []),
            list(daughters or []),
        )
