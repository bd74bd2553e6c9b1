"""Unit tests for ion and level distributions."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from level_cascade.distributions import (
    HARTREE_TO_EV,
    convert_energy,
    ion_distribution,
    level_distribution,
    level_tree,
    total_occupation,
)
from level_cascade.graph import extract_levels
from level_cascade.levels import AugerLine, DecayData, Level, LineLevel, RadiativeLine
from level_cascade.ordering import sort_by_energy


def _level(energy, electrons, occ=0.0, j="1/2", parity="+"):
    return Level.from_line_level(LineLevel(energy, j, parity, electrons, occ))


class TestEnergyUnits(unittest.TestCase):

    def test_conversion(self):
        self.assertEqual(convert_energy(2.0, "Hartree"), 2.0)
        self.assertAlmostEqual(convert_energy(1.0, "eV"), HARTREE_TO_EV)
        self.assertAlmostEqual(convert_energy(1.0, "kayser"), 219474.6313632)

    def test_unknown_unit_raises(self):
        with self.assertRaises(ValueError):
            convert_energy(1.0, "kelvin")


class TestIonDistribution(unittest.TestCase):

    def test_sums_by_electron_count_with_gaps(self):
        levels = [_level(-1.0, 9, 0.2), _level(-2.0, 9, 0.1), _level(-3.0, 6, 0.7)]
        dist = ion_distribution(levels)
        self.assertEqual(list(dist), [9, 8, 7, 6])
        self.assertAlmostEqual(dist[9], 0.3)
        self.assertEqual(dist[8], 0.0)
        self.assertEqual(dist[7], 0.0)
        self.assertAlmostEqual(dist[6], 0.7)

    def test_empty(self):
        self.assertEqual(ion_distribution([]), {})
        self.assertEqual(total_occupation([]), 0.0)

    def test_total_occupation(self):
        levels = [_level(-1.0, 2, 0.25), _level(-2.0, 1, 0.5)]
        self.assertAlmostEqual(total_occupation(levels), 0.75)


class TestLevelDistribution(unittest.TestCase):

    def setUp(self):
        # positions after ordering: 1 (-1.0, 8e), 2 (-2.0, 9e), 3 (-3.0, 8e), 4 (-4.0, 9e)
        self.levels = sort_by_energy([
            _level(-4.0, 9, 0.1),
            _level(-2.0, 9, 0.2, j="3/2", parity="-"),
            _level(-3.0, 8, 0.3),
            _level(-1.0, 8, 0.0),
        ])

    def test_grouped_by_electrons_then_energy(self):
        records = level_distribution(self.levels, energy_unit="Hartree")
        self.assertEqual([r["level_no"] for r in records], [2, 4, 3])
        self.assertEqual([r["electrons"] for r in records], [9, 9, 8])
        self.assertEqual(records[0]["symmetry"], "3/2-")
        self.assertEqual(records[0]["energy"], -2.0)
        self.assertAlmostEqual(records[2]["relative_occ"], 0.3)

    def test_include_zero_levels(self):
        records = level_distribution(self.levels, nonzero_only=False)
        self.assertEqual([r["level_no"] for r in records], [2, 4, 1, 3])
        self.assertAlmostEqual(records[0]["energy"], -2.0 * HARTREE_TO_EV)


class TestLevelTree(unittest.TestCase):

    def test_parent_and_daughter_summaries(self):
        upper = LineLevel(-1.0, "1/2", "+", 3)
        middle = LineLevel(-2.0, "3/2", "-", 3)
        lower = LineLevel(-3.0, "2", "+", 2)
        data = DecayData(
            "tree",
            radiative=[RadiativeLine(upper, middle, 1.0)],
            auger=[AugerLine(middle, lower, 1.0)],
        )
        tree = level_tree(extract_levels(data), energy_unit="Hartree")
        self.assertEqual([node["level_no"] for node in tree], [1, 2, 3])

        middle_node = tree[1]
        self.assertEqual(middle_node["symmetry"], "3/2-")
        self.assertEqual(len(middle_node["parents"]), 1)
        self.assertEqual(middle_node["parents"][0]["process"], "radiative")
        self.assertEqual(middle_node["parents"][0]["energy"], -1.0)
        self.assertEqual(middle_node["daughters"][0]["process"], "auger")
        self.assertEqual(middle_node["daughters"][0]["electrons"], 2)
        self.assertEqual(middle_node["daughters"][0]["symmetry"], "2+")
        self.assertEqual(tree[2]["daughters"], [])


if __name__ == "__main__":
    unittest.main()
