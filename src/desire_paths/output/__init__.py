"""
Output, logging and persistence for Desire Paths.

- DebugLogger: Leveled diagnostic log
- WearEventLogger: Structured record of terrain changes
- SaveGame / serialize_wear_map: World save persistence of the wear map
"""

from .debug_logger import DebugLogger, LogLevel, LogEntry, create_console_logger
from .event_logger import WearEventLogger, WearEventRecord
from .save_data import (
    SaveGame,
    SaveDataError,
    serialize_wear_map,
    deserialize_wear_map,
    store_wear_map,
    load_wear_map,
)

__all__ = [
    'DebugLogger',
    'LogLevel',
    'LogEntry',
    'create_console_logger',
    'WearEventLogger',
    'WearEventRecord',
    'SaveGame',
    'SaveDataError',
    'serialize_wear_map',
    'deserialize_wear_map',
    'store_wear_map',
    'load_wear_map',
]
