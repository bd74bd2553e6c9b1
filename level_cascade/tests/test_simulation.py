"""End-to-end tests of the cascade pipeline on the packaged Ne 1s example."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from level_cascade.config import SimulationSettings, load_config
from level_cascade.errors import MissingDataset
from level_cascade.merge import MergeReport
from level_cascade.simulation import (
    Simulation,
    build_level_tree,
    perform,
    simulate_level_distribution,
)

EXAMPLE = Path(__file__).parent.parent / "config_neon_1s.json"


def _simulation(**settings_overrides) -> Simulation:
    cfg = load_config(EXAMPLE)
    cfg["settings"] = {**cfg["settings"], **settings_overrides}
    return Simulation.from_config(cfg, base_dir=EXAMPLE.parent)


class TestBuildLevelTree(unittest.TestCase):

    def test_merge_reports(self):
        _, reports = build_level_tree(_simulation())
        self.assertEqual(reports, [MergeReport(0, 4, 0, 4), MergeReport(4, 2, 3, 6)])

    def test_sorted_positions_and_initial_occupation(self):
        levels, _ = build_level_tree(_simulation())
        self.assertEqual(
            [level.energy for level in levels],
            [-96.0, -126.4, -126.6, -127.70, -127.72, -128.5],
        )
        self.assertEqual([level.relative_occ for level in levels], [0.0] * 5 + [1.0])
        self.assertEqual(levels[5].electrons, 10)

    def test_photon_energy_selects_family_member(self):
        levels, reports = build_level_tree(_simulation(photon_energy=2000.0, initial_occupations=[[1, 1.0]]))
        self.assertEqual(reports[0], MergeReport(0, 2, 0, 2))
        self.assertEqual(len(levels), 6)

    def test_unknown_photon_energy_raises(self):
        with self.assertRaises(MissingDataset):
            build_level_tree(_simulation(photon_energy=1500.0))

    def test_out_of_range_initial_position_raises(self):
        with self.assertRaises(ValueError):
            build_level_tree(_simulation(initial_occupations=[[7, 1.0]]))


class TestPerform(unittest.TestCase):

    def test_ion_distribution(self):
        results = perform(_simulation())
        dist = results["ion_distribution"]
        self.assertEqual(list(dist), [10, 9, 8])
        self.assertAlmostEqual(dist[10], 0.0)
        self.assertAlmostEqual(dist[9], 0.23)
        self.assertAlmostEqual(dist[8], 0.77)
        self.assertAlmostEqual(results["total_occupation"], 1.0)

    def test_sequential_rounds(self):
        results = perform(_simulation())
        self.assertTrue(results["converged"])
        self.assertEqual(results["rounds"], 3)
        np.testing.assert_allclose(results["moved"], [1.0, 0.8, 0.0])

    def test_buffered_mode_same_distribution(self):
        seq = perform(_simulation())
        buf = perform(_simulation(propagation_mode="buffered"))
        for n in seq["ion_distribution"]:
            self.assertAlmostEqual(seq["ion_distribution"][n], buf["ion_distribution"][n])

    def test_level_distribution_order(self):
        records = perform(_simulation())["level_distribution"]
        self.assertEqual([(r["electrons"], r["level_no"]) for r in records], [(9, 4), (9, 5), (8, 2), (8, 3)])
        self.assertAlmostEqual(records[0]["relative_occ"], 0.8 / 6 + 0.02)
        self.assertAlmostEqual(records[2]["relative_occ"], 0.6)

    def test_properties_filter_results(self):
        results = perform(_simulation(properties=["ion_distribution"]))
        self.assertIn("ion_distribution", results)
        self.assertNotIn("level_distribution", results)
        self.assertEqual(len(results["levels"]), 6)

    def test_simulate_level_distribution_uses_given_levels(self):
        simulation = _simulation()
        levels, _ = build_level_tree(simulation)
        results = simulate_level_distribution(levels, simulation)
        self.assertAlmostEqual(sum(level.relative_occ for level in levels), 1.0)
        self.assertEqual(levels[0].relative_occ, 0.0)
        self.assertAlmostEqual(results["ion_distribution"][8], 0.77)

    def test_default_settings(self):
        settings = SimulationSettings()
        self.assertEqual(settings.propagation_mode, "sequential")
        self.assertEqual(settings.initial_occupations, ())


if __name__ == "__main__":
    unittest.main()
