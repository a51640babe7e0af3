"""
Core state and time for Desire Paths.
"""

from .state import BlockPos, WearRecord, WearStore
from .clock import WorldCalendar

__all__ = [
    'BlockPos',
    'WearRecord',
    'WearStore',
    'WorldCalendar',
]
