"""
Utility functions for Desire Paths.
"""

from .rng import SeededRNG
from .validators import (
    ValidationError,
    validate_range,
    validate_positive,
    validate_block_code,
    validate_keywords,
)

__all__ = [
    'SeededRNG',
    'ValidationError',
    'validate_range',
    'validate_positive',
    'validate_block_code',
    'validate_keywords',
]
