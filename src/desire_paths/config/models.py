"""
Configuration data model for Desire Paths.

Thresholds, timings and block codes that drive the wear engine. The
defaults match the values the mod ships with.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..utils.validators import (
    validate_block_code,
    validate_keywords,
    validate_not_empty,
    validate_positive,
    validate_range,
    validate_type,
)


@dataclass
class DesirePathsConfig:
    """
    Tunables for the wear engine.

    Attributes:
        plant_kill_threshold: Wear at or above which plants on top of a
            worn cell are removed
        dirt_path_threshold: Wear at or above which soil-like ground turns
            into the worn-path block
        decay_interval_ms: Real milliseconds between decay sweeps
        stale_after_hours: Game hours without traffic before a cell loses
            one wear point
        release_distance: Distance (blocks) a player must be from a queued
            cell before its conversion is evaluated
        path_block_code: Code of the worn-path block
        soil_keywords: Substrings of a block code path that mark it soil-like
        save_key: Save-game key the wear map is stored under
    """
    plant_kill_threshold: int = 5
    dirt_path_threshold: int = 20
    decay_interval_ms: int = 5000
    stale_after_hours: float = 48.0
    release_distance: float = 30.0
    path_block_code: str = "desire-paths:packeddirt-path"
    soil_keywords: List[str] = field(default_factory=lambda: ["soil", "dirt", "grass"])
    save_key: str = "desirepaths"

    @property
    def release_distance_sq(self) -> float:
        return self.release_distance * self.release_distance

    def validate(self) -> 'DesirePathsConfig':
        """
        Check every field.

        Raises:
            ValidationError: On the first invalid field
        """
        validate_range(self.plant_kill_threshold, 1, 10_000, "plant_kill_threshold")
        validate_range(self.dirt_path_threshold, 1, 10_000, "dirt_path_threshold")
        validate_positive(self.decay_interval_ms, "decay_interval_ms", allow_zero=False)
        validate_positive(self.stale_after_hours, "stale_after_hours", allow_zero=False)
        validate_positive(self.release_distance, "release_distance")
        validate_block_code(self.path_block_code, "path_block_code")
        validate_keywords(self.soil_keywords, "soil_keywords")
        validate_type(self.save_key, str, "save_key")
        validate_not_empty(self.save_key, "save_key")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'plant_kill_threshold': self.plant_kill_threshold,
            'dirt_path_threshold': self.dirt_path_threshold,
            'decay_interval_ms': self.decay_interval_ms,
            'stale_after_hours': self.stale_after_hours,
            'release_distance': self.release_distance,
            'path_block_code': self.path_block_code,
            'soil_keywords': list(self.soil_keywords),
            'save_key': self.save_key,
        }
