"""
Runner script for the level-cascade engine.

Loads a simulation config, builds the whole-cascade level graph from all
line datasets, propagates the initial occupation to the terminal levels and
writes the resulting distributions.

Usage
-----
    python runner.py config.json [--output-dir results/] [--log-level INFO]

Outputs (in the output directory):
    ion_distribution.csv, level_distribution.csv, summary.json and a
    config snapshot with SHA-256 hash for reproducibility.
"""

from __future__ import annotations

import argparse
import csv
import hashlib
import json
import time
from pathlib import Path
from typing import Sequence

from .config import load_config
from .distributions import ion_distribution, level_distribution
from .graph import cascade_depth
from .logging_config import get_logger, setup_logging
from .simulation import Simulation, perform

logger = get_logger("runner")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Level cascade engine: probability propagation through a cascade."
    )
    parser.add_argument("config", help="Path to JSON or YAML simulation file.")
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory for output files (default: results/).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for progress messages (default: WARNING).",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _write_csv(path: Path, fieldnames: list[str], rows: list[dict]) -> None:
    with path.open("w", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def _config_hash(cfg: dict) -> str:
    """Compute a SHA-256 hash of the JSON-serialised config for reproducibility."""
    serialised = json.dumps(cfg, sort_keys=True).encode("utf-8")
    return hashlib.sha256(serialised).hexdigest()


def _save_config_snapshot(output_dir: Path, cfg: dict) -> None:
    snapshot = {
        "config": cfg,
        "sha256": _config_hash(cfg),
    }
    (output_dir / "config_snapshot.json").write_text(json.dumps(snapshot, indent=2))


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def _print_summary(name, n_levels, depth, results, ion_dist, elapsed):
    sep = "-" * 58
    print(sep)
    print(f"  Level Cascade Engine: {name}")
    print(sep)
    print(f"  Levels                : {n_levels}")
    print(f"  Cascade depth (lines) : {depth}")
    print(f"  Rounds                : {results['rounds']}")
    print(f"  Converged             : {results['converged']}")
    print(f"  Total occupation      : {results['total_occupation']:.10f}")
    print(f"  Elapsed               : {elapsed:.3f}s")
    print()
    print("  Ion distribution")
    print(f"  {'No. electrons':>14}  {'Rel. occ.':>12}")
    for n_electrons, occ in ion_dist.items():
        print(f"  {n_electrons:>14}  {occ:>12.5e}")
    print(sep)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    setup_logging(args.log_level)
    output_dir = Path(args.output_dir)
    _ensure_dir(output_dir)

    config_path = Path(args.config)
    cfg = load_config(config_path)
    _save_config_snapshot(output_dir, cfg)

    simulation = Simulation.from_config(cfg, base_dir=config_path.parent)

    t0 = time.perf_counter()
    results = perform(simulation)
    elapsed = time.perf_counter() - t0
    levels = results["levels"]
    depth = cascade_depth(levels)

    ion_dist = results.get("ion_distribution", ion_distribution(levels))
    _write_csv(
        output_dir / "ion_distribution.csv",
        ["electrons", "relative_occ"],
        [{"electrons": n, "relative_occ": occ} for n, occ in ion_dist.items()],
    )
    _write_csv(
        output_dir / "level_distribution.csv",
        ["electrons", "level_no", "symmetry", "energy", "relative_occ"],
        results.get("level_distribution", level_distribution(levels)),
    )

    (output_dir / "summary.json").write_text(
        json.dumps(
            {
                "name": simulation.name,
                "config_sha256": _config_hash(cfg),
                "n_levels": len(levels),
                "cascade_depth": depth,
                "propagation_mode": simulation.settings.propagation_mode,
                "rounds": results["rounds"],
                "moved_per_round": results["moved"].tolist(),
                "converged": results["converged"],
                "total_occupation": results["total_occupation"],
                "merge_reports": [
                    {
                        "total_before": r.total_before,
                        "newly_added": r.newly_added,
                        "modified": r.modified,
                        "total_after": r.total_after,
                    }
                    for r in results["merge_reports"]
                ],
                "ion_distribution": {str(n): occ for n, occ in ion_dist.items()},
                "elapsed_seconds": elapsed,
            },
            indent=2,
        )
    )
    logger.info("Results written to %s", output_dir.resolve())

    _print_summary(simulation.name, len(levels), depth, results, ion_dist, elapsed)
    print(f"  Results saved to : {output_dir.resolve()}")


if __name__ == "__main__":
    main()
