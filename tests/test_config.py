"""
Config Tests: Loading and Validation

Tests:
- Shipped config matches the defaults
- Partial overrides
- Type and range errors
- Missing files and directories
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import json
import tempfile
import unittest
from desire_paths.config import (
    ConfigLoader, ConfigError, DesirePathsConfig, load_config,
)
from desire_paths.config.loader import CONFIG_FILENAME
from desire_paths.utils.validators import ValidationError


CONFIG_DIR = os.path.join(os.path.dirname(__file__), '..', 'config')


class TestDefaults(unittest.TestCase):
    """Test the default configuration."""

    def test_default_values(self):
        config = DesirePathsConfig()

        self.assertEqual(config.plant_kill_threshold, 5)
        self.assertEqual(config.dirt_path_threshold, 20)
        self.assertEqual(config.decay_interval_ms, 5000)
        self.assertEqual(config.stale_after_hours, 48.0)
        self.assertEqual(config.release_distance_sq, 900.0)
        self.assertEqual(config.path_block_code, "desire-paths:packeddirt-path")
        self.assertEqual(config.save_key, "desirepaths")

    def test_shipped_file_matches_defaults(self):
        config = load_config(CONFIG_DIR)
        self.assertEqual(config.to_dict(), DesirePathsConfig().to_dict())

    def test_validate_rejects_bad_values(self):
        with self.assertRaises(ValidationError):
            DesirePathsConfig(dirt_path_threshold=0).validate()
        with self.assertRaises(ValidationError):
            DesirePathsConfig(path_block_code="a:b:c").validate()
        with self.assertRaises(ValidationError):
            DesirePathsConfig(soil_keywords=["Soil"]).validate()


class TestConfigLoader(unittest.TestCase):
    """Test loading desire_paths.json from disk."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, data):
        with open(os.path.join(self.config_dir, CONFIG_FILENAME), 'w') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_partial_override(self):
        """Keys left out keep their defaults."""
        self.write({"thresholds": {"dirt_path": 8}, "timing": {"release_distance": 12}})
        config = load_config(self.config_dir)

        self.assertEqual(config.dirt_path_threshold, 8)
        self.assertEqual(config.release_distance, 12)
        self.assertEqual(config.plant_kill_threshold, 5)

    def test_blocks_and_save_key(self):
        self.write({
            "blocks": {"path_block": "mymod:trail", "soil_keywords": ["loam"]},
            "save_key": "trails",
        })
        config = ConfigLoader(self.config_dir).load_all()

        self.assertEqual(config.path_block_code, "mymod:trail")
        self.assertEqual(config.soil_keywords, ["loam"])
        self.assertEqual(config.save_key, "trails")

    def test_wrong_type(self):
        self.write({"thresholds": {"plant_kill": "five"}})
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.config_dir)
        self.assertEqual(ctx.exception.path, "thresholds.plant_kill")

    def test_bool_is_not_a_number(self):
        self.write({"timing": {"decay_interval_ms": True}})
        with self.assertRaises(ConfigError):
            load_config(self.config_dir)

    def test_blocks_must_be_object(self):
        self.write({"blocks": 5})
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.config_dir)
        self.assertEqual(ctx.exception.path, "blocks")

    def test_save_key_must_be_string(self):
        self.write({"save_key": 5})
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.config_dir)
        self.assertEqual(ctx.exception.path, "save_key")

    def test_out_of_range(self):
        self.write({"thresholds": {"plant_kill": -1}})
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.config_dir)
        self.assertEqual(ctx.exception.path, "plant_kill_threshold")

    def test_invalid_json(self):
        self.write("{not json")
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.config_dir)
        self.assertEqual(ctx.exception.file, CONFIG_FILENAME)

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config(self.config_dir)

    def test_missing_directory(self):
        with self.assertRaises(ConfigError):
            ConfigLoader(os.path.join(self.config_dir, "nope"))


def run_tests():
    """Run all config tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestDefaults))
    suite.addTests(loader.loadTestsFromTestCase(TestConfigLoader))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == '__main__':
    success = run_tests()
    sys.exit(0 if success else 1)
