"""Unit tests for the configuration module."""

from __future__ import annotations
import json, sys, tempfile, unittest
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from level_cascade.config import SimulationSettings, load_config, settings_from_config

LINE = {
    "initial": {"energy": -1.0, "J": "1/2", "parity": "+", "electrons": 3},
    "final": {"energy": -2.0, "J": "1/2", "parity": "-", "electrons": 3},
    "photon_rate": 1.0,
}

VALID_CFG = {
    "name": "minimal",
    "settings": {"initial_occupations": [[1, 1.0]]},
    "datasets": [{"kind": "decay", "radiative": [LINE]}],
}


def _write_cfg(d, suffix=".json"):
    f = tempfile.NamedTemporaryFile(suffix=suffix, delete=False, mode="w")
    if suffix == ".json":
        json.dump(d, f)
    else:
        yaml.safe_dump(d, f)
    f.close()
    return Path(f.name)


def _with_settings(**overrides):
    return {**VALID_CFG, "settings": {**VALID_CFG["settings"], **overrides}}


class TestLoadConfig(unittest.TestCase):

    def test_valid_json_loads(self):
        cfg = load_config(_write_cfg(VALID_CFG))
        self.assertEqual(cfg["name"], "minimal")

    def test_valid_yaml_loads(self):
        for suffix in (".yaml", ".yml"):
            cfg = load_config(_write_cfg(VALID_CFG, suffix))
            self.assertEqual(cfg["settings"]["initial_occupations"], [[1, 1.0]])

    def test_unsupported_suffix_raises(self):
        path = _write_cfg(VALID_CFG)
        toml_path = path.with_suffix(".toml")
        path.rename(toml_path)
        with self.assertRaises(ValueError):
            load_config(toml_path)

    def test_file_not_found_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/path/config.json")

    def test_non_mapping_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg([1, 2, 3]))

    def test_missing_sections_raise(self):
        for key in ("settings", "datasets"):
            bad = {k: v for k, v in VALID_CFG.items() if k != key}
            with self.assertRaises(ValueError):
                load_config(_write_cfg(bad))

    def test_empty_datasets_raise(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg({**VALID_CFG, "datasets": []}))

    def test_unknown_dataset_kind_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg({**VALID_CFG, "datasets": [{"kind": "excitation"}]}))


class TestSettingsValidation(unittest.TestCase):

    def test_missing_initial_occupations_raises(self):
        bad = {**VALID_CFG, "settings": {}}
        with self.assertRaises(ValueError):
            load_config(_write_cfg(bad))

    def test_empty_settings_section_raises(self):
        path = _write_cfg({"settings": None, "datasets": VALID_CFG["datasets"]}, ".yaml")
        path.write_text(path.read_text().replace("settings: null", "settings:"))
        with self.assertRaises(ValueError):
            load_config(path)
        with self.assertRaises(ValueError):
            load_config(_write_cfg({**VALID_CFG, "settings": [[1, 1.0]]}))

    def test_bad_position_raises(self):
        for pair in ([0, 1.0], [1.5, 1.0], [1, 0.5, 2]):
            with self.assertRaises(ValueError):
                load_config(_write_cfg(_with_settings(initial_occupations=[pair])))

    def test_occupation_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg(_with_settings(initial_occupations=[[1, 1.5]])))

    def test_bad_mode_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg(_with_settings(propagation_mode="stochastic")))

    def test_bad_max_rounds_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg(_with_settings(max_rounds=0)))

    def test_unknown_property_raises(self):
        with self.assertRaises(ValueError):
            load_config(_write_cfg(_with_settings(properties=["ion_distribution", "spectrum"])))


class TestSettingsFromConfig(unittest.TestCase):

    def test_defaults(self):
        settings = settings_from_config(load_config(_write_cfg(VALID_CFG)))
        self.assertEqual(settings.initial_occupations, ((1, 1.0),))
        self.assertIsNone(settings.photon_energy)
        self.assertEqual(settings.propagation_mode, "sequential")
        self.assertIsNone(settings.max_rounds)
        self.assertEqual(settings.properties, SimulationSettings().properties)

    def test_explicit_values(self):
        cfg = _with_settings(
            photon_energy=1000,
            propagation_mode="buffered",
            max_rounds=12,
            properties=["ion_distribution"],
        )
        settings = settings_from_config(load_config(_write_cfg(cfg, ".yaml")))
        self.assertEqual(settings.photon_energy, 1000.0)
        self.assertEqual(settings.propagation_mode, "buffered")
        self.assertEqual(settings.max_rounds, 12)
        self.assertEqual(settings.properties, frozenset({"ion_distribution"}))

    def test_packaged_example_loads(self):
        cfg = load_config(Path(__file__).parent.parent / "config_neon_1s.json")
        settings = settings_from_config(cfg)
        self.assertEqual(settings.photon_energy, 1000.0)
        self.assertEqual(settings.initial_occupations, ((6, 1.0),))


if __name__ == "__main__":
    unittest.main()
