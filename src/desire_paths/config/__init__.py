"""
Configuration loading and data model for Desire Paths.
"""

from .loader import ConfigLoader, ConfigError, load_config
from .models import DesirePathsConfig

__all__ = [
    'ConfigLoader',
    'ConfigError',
    'load_config',
    'DesirePathsConfig',
]
