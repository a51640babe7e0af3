"""
Configuration loader for Desire Paths.

Loads ``desire_paths.json`` and converts it to a typed
``DesirePathsConfig``. Provides helpful error messages for malformed
configs.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.validators import ValidationError
from .models import DesirePathsConfig


CONFIG_FILENAME = "desire_paths.json"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    def __init__(self, message: str, file: Optional[str] = None,
                 path: Optional[str] = None):
        self.message = message
        self.file = file
        self.path = path

        full_msg = message
        if file:
            full_msg = f"[{file}] {full_msg}"
        if path:
            full_msg = f"{full_msg} (at {path})"

        super().__init__(full_msg)


class ConfigLoader:
    """
    Loads and parses the Desire Paths configuration file.

    Usage:
        loader = ConfigLoader("./config")
        config = loader.load_all()
    """

    # Keys in the "thresholds" and "timing" sections, with expected types
    THRESHOLD_FIELDS = {
        'plant_kill': ('plant_kill_threshold', int),
        'dirt_path': ('dirt_path_threshold', int),
    }
    TIMING_FIELDS = {
        'decay_interval_ms': ('decay_interval_ms', int),
        'stale_after_hours': ('stale_after_hours', (int, float)),
        'release_distance': ('release_distance', (int, float)),
    }

    def __init__(self, config_dir: str):
        """
        Initialize the config loader.

        Args:
            config_dir: Path to directory containing desire_paths.json
        """
        self.config_dir = Path(config_dir)

        if not self.config_dir.exists():
            raise ConfigError(f"Config directory not found: {config_dir}")

    def _load_json(self, filename: str) -> Dict[str, Any]:
        """Load a JSON file from the config directory."""
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}", file=filename)

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON: {e}", file=filename)

        if not isinstance(data, dict):
            raise ConfigError("Top level must be an object", file=filename)
        return data

    def _read_section(self, data: dict, section: str, fields: dict,
                      values: Dict[str, Any]) -> None:
        """Copy typed values from one section into the kwargs dict."""
        section_data = data.get(section, {})
        if not isinstance(section_data, dict):
            raise ConfigError("Section must be an object",
                              file=CONFIG_FILENAME, path=section)

        for key, (attr, expected) in fields.items():
            if key not in section_data:
                continue
            value = section_data[key]
            # bool is an int subclass but never a valid threshold
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ConfigError(f"Wrong type for {key}: {type(value).__name__}",
                                  file=CONFIG_FILENAME, path=f"{section}.{key}")
            values[attr] = value

    def parse(self, data: Dict[str, Any]) -> DesirePathsConfig:
        """Build a validated config from already-decoded JSON."""
        values: Dict[str, Any] = {}
        self._read_section(data, "thresholds", self.THRESHOLD_FIELDS, values)
        self._read_section(data, "timing", self.TIMING_FIELDS, values)

        blocks = data.get("blocks", {})
        if not isinstance(blocks, dict):
            raise ConfigError("Section must be an object",
                              file=CONFIG_FILENAME, path="blocks")
        if "path_block" in blocks:
            values['path_block_code'] = blocks["path_block"]
        if "soil_keywords" in blocks:
            values['soil_keywords'] = blocks["soil_keywords"]

        if "save_key" in data:
            values['save_key'] = data["save_key"]

        config = DesirePathsConfig(**values)
        try:
            config.validate()
        except ValidationError as e:
            raise ConfigError(e.message, file=CONFIG_FILENAME, path=e.field)
        return config

    def load_all(self) -> DesirePathsConfig:
        """
        Load the configuration file.

        Returns:
            Fully populated DesirePathsConfig object

        Raises:
            ConfigError: If the file is missing or malformed
        """
        return self.parse(self._load_json(CONFIG_FILENAME))


def load_config(config_dir: str) -> DesirePathsConfig:
    """
    Convenience function to load the configuration.

    Args:
        config_dir: Path to config directory

    Returns:
        Fully populated DesirePathsConfig object
    """
    loader = ConfigLoader(config_dir)
    return loader.load_all()
