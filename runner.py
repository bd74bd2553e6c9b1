"""Repository-level CLI entrypoint for the level cascade engine.

    python runner.py <simulation> [--output-dir results/] [--log-level INFO]

``<simulation>`` is a JSON or YAML simulation file.  Example simulations
ship inside the package (``level_cascade/config_neon_1s.json``) and may be
named from the repository root by file name or by stem alone
(``python runner.py config_neon_1s``).  Relative CSV line tables inside a
simulation are resolved against the directory of the resolved file.
"""

from __future__ import annotations

import sys
from pathlib import Path

from level_cascade.runner import main

SIMULATION_DIRS = (Path("."), Path("level_cascade"))
SIMULATION_SUFFIXES = (".json", ".yaml", ".yml")


def _find_simulation(name: str) -> Path | None:
    """First existing simulation file for ``name`` in ``SIMULATION_DIRS``.

    A name without one of ``SIMULATION_SUFFIXES`` is tried with each of
    them in turn.
    """
    candidate = Path(name)
    if candidate.suffix.lower() in SIMULATION_SUFFIXES:
        names = [candidate]
    else:
        names = [candidate] + [candidate.with_name(candidate.name + s) for s in SIMULATION_SUFFIXES]

    for directory in SIMULATION_DIRS:
        for n in names:
            path = n if n.is_absolute() else directory / n
            if path.is_file():
                return path
    return None


def _rewrite_config_path_arg(argv: list[str]) -> list[str]:
    """Replace the simulation argument with the path of the file it names.

    The argument is left untouched when no file matches, so the loader
    reports the missing file under the name the user gave.
    """
    if len(argv) < 2 or argv[1].startswith("-"):
        return argv

    found = _find_simulation(argv[1])
    if found is None or str(found) == argv[1]:
        return argv

    out = list(argv)
    out[1] = str(found)
    return out


if __name__ == "__main__":
    sys.argv = _rewrite_config_path_arg(sys.argv)
    main()
