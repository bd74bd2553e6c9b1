"""
Construction of line datasets from configuration entries and line tables.

Lines are given either inline as JSON/YAML records::

    {"initial": {"energy": -1.2, "J": "3/2", "parity": "-", "electrons": 9},
     "final":   {"energy": -3.4, "J": "1/2", "parity": "+", "electrons": 9},
     "photon_rate": 2.1e13}

or as a CSV table with flattened columns (``initial_energy``,
``initial_J``, ``initial_parity``, ``initial_electrons``, optional
``initial_occupation``, the ``final_*`` counterparts and the rate column).
The rate field is ``photon_rate`` for radiative, ``total_rate`` for Auger
and ``cross_section`` for photoionization lines.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Union

import pandas as pd

from .levels import (
    AugerLine,
    DecayData,
    Line,
    LineLevel,
    PhotoIonData,
    PhotoLine,
    Process,
    RadiativeLine,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RATE_FIELDS: dict[Process, str] = {
    Process.RADIATIVE: "photon_rate",
    Process.AUGER: "total_rate",
    Process.PHOTO: "cross_section",
}
ENDPOINT_FIELDS = ("energy", "J", "parity", "electrons")
DATASET_KINDS = {"decay", "photo", "photo_family"}
_TEXT_COLUMNS = ("initial_J", "final_J", "initial_parity", "final_parity")

LineSource = Union[str, Path, list]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def _line_level(record: dict[str, Any], where: str) -> LineLevel:
    missing = [f for f in ENDPOINT_FIELDS if f not in record]
    if missing:
        raise ValueError(f"{where} is missing field(s): {missing}")
    return LineLevel(
        energy=record["energy"],
        j=record["J"],
        parity=record["parity"],
        electrons=record["electrons"],
        relative_occ=record.get("occupation", 0.0),
    )


def _make_line(
    process: Process,
    initial: LineLevel,
    final: LineLevel,
    rate: float,
    photon_energy: float = 0.0,
) -> Line:
    if process is Process.RADIATIVE:
        return RadiativeLine(initial, final, float(rate))
    if process is Process.AUGER:
        return AugerLine(initial, final, float(rate))
    return PhotoLine(initial, final, float(rate), float(photon_energy))


def lines_from_records(
    records: Iterable[dict[str, Any]],
    process: Process | str,
    photon_energy: float = 0.0,
) -> tuple[Line, ...]:
    """Build line records of one process from nested dicts.

    Raises
    ------
    UnknownProcess
        If ``process`` is not a known process tag.
    ValueError
        If an endpoint field or the rate field is missing.
    """
    process = Process.parse(process)
    rate_field = RATE_FIELDS[process]
    lines = []
    for i, record in enumerate(records):
        where = f"{process.value} line {i}"
        if rate_field not in record:
            raise ValueError(f"{where} is missing its rate field {rate_field!r}")
        lines.append(_make_line(
            process,
            _line_level(record.get("initial", {}), f"{where} initial level"),
            _line_level(record.get("final", {}), f"{where} final level"),
            record[rate_field],
            photon_energy,
        ))
    return tuple(lines)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def lines_from_frame(
    df: pd.DataFrame,
    process: Process | str,
    photon_energy: float = 0.0,
) -> tuple[Line, ...]:
    """Build line records of one process from a flat DataFrame.

    Raises
    ------
    ValueError
        If required columns are missing.
    """
    process = Process.parse(process)
    rate_field = RATE_FIELDS[process]
    df = df.rename(columns=lambda c: c.strip())
    required = [f"{side}_{f}" for side in ("initial", "final") for f in ENDPOINT_FIELDS]
    required.append(rate_field)
    missing = sorted(set(required) - set(df.columns))
    if missing:
        raise ValueError(
            f"Line table is missing required column(s): {missing}. "
            f"Found: {sorted(df.columns.tolist())}."
        )

    records = []
    for row in df.to_dict(orient="records"):
        record: dict[str, Any] = {rate_field: row[rate_field]}
        for side in ("initial", "final"):
            endpoint = {f: row[f"{side}_{f}"] for f in ENDPOINT_FIELDS}
            occupation = row.get(f"{side}_occupation")
            if occupation is not None and not pd.isna(occupation):
                endpoint["occupation"] = occupation
            record[side] = endpoint
        records.append(record)
    return lines_from_records(records, process, photon_energy)


def load_line_table(
    csv_path: str | Path,
    process: Process | str,
    photon_energy: float = 0.0,
) -> tuple[Line, ...]:
    """Read a CSV line table into line records of one process.

    Raises
    ------
    FileNotFoundError
        If the CSV file does not exist.
    ValueError
        If the file cannot be parsed, is empty, or lacks required columns.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Line table not found: {csv_path}")

    try:
        df = pd.read_csv(csv_path, dtype={c: str for c in _TEXT_COLUMNS})
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ValueError(f"Failed to parse line table '{csv_path}': {exc}") from exc

    if df.empty:
        raise ValueError(f"Line table '{csv_path}' contains no rows.")

    lines = lines_from_frame(df, process, photon_energy)
    logger.info("Read %d %s lines from %s", len(lines), Process.parse(process).value, csv_path)
    return lines


def _resolve_lines(
    source: LineSource,
    process: Process,
    base_dir: Path,
    photon_energy: float = 0.0,
) -> tuple[Line, ...]:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_absolute():
            path = base_dir / path
        return load_line_table(path, process, photon_energy)
    return lines_from_records(source, process, photon_energy)


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


def _photo_dataset(entry: dict[str, Any], base_dir: Path) -> PhotoIonData:
    if "photon_energy" not in entry:
        raise ValueError(f"Photo dataset {entry.get('name')!r} requires 'photon_energy'")
    photon_energy = float(entry["photon_energy"])
    return PhotoIonData(
        name=str(entry.get("name", f"photo@{photon_energy}")),
        photon_energy=photon_energy,
        photo=_resolve_lines(entry.get("photo", []), Process.PHOTO, base_dir, photon_energy),
    )


def dataset_from_config(
    entry: dict[str, Any],
    base_dir: str | Path = ".",
) -> DecayData | PhotoIonData | list[PhotoIonData]:
    """Build one dataset (or photo family) from a ``datasets`` config entry.

    Parameters
    ----------
    entry : dict
        Must contain ``kind`` (``decay``, ``photo`` or ``photo_family``).
        Line sets are given under the process names (``radiative``,
        ``auger``, ``photo``) as inline records or CSV paths.
    base_dir : str or Path
        Directory relative CSV paths are resolved against.

    Raises
    ------
    ValueError
        For an unknown ``kind`` or malformed lines.
    UnknownProcess
        For a line set named after an unknown process.
    """
    base_dir = Path(base_dir)
    kind = entry.get("kind")
    if kind not in DATASET_KINDS:
        raise ValueError(f"dataset kind must be one of {DATASET_KINDS}, got {kind!r}")

    line_sets = {k: v for k, v in entry.items() if k not in ("name", "kind", "photon_energy", "members")}
    for name in line_sets:
        Process.parse(name)

    if kind == "decay":
        return DecayData(
            name=str(entry.get("name", "decay")),
            radiative=_resolve_lines(entry.get("radiative", []), Process.RADIATIVE, base_dir),
            auger=_resolve_lines(entry.get("auger", []), Process.AUGER, base_dir),
        )
    if kind == "photo":
        return _photo_dataset(entry, base_dir)
    return [_photo_dataset(member, base_dir) for member in entry.get("members", [])]
