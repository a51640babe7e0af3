"""
Wear event logging for Desire Paths.

Structured record of everything the engine did to the world: steps,
plant removal, conversions to the worn-path block and reversions.
Purely diagnostic; nothing reads it back into the engine.
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional
import csv
import io
import json

from ..core.state import BlockPos


# Event types
STEP = "step"
PLANT_CLEARED = "plant_cleared"
CONVERTED = "converted"
REVERTED = "reverted"
REMOVED = "removed"


@dataclass
class WearEventRecord:
    """
    One thing that happened to one cell.

    ``block_code`` is the block involved: the captured ground for steps,
    the trampled plant, or the block written by a conversion/reversion.
    """
    timestamp: float
    event_type: str
    pos: BlockPos
    wear_level: int = 0
    block_code: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        x, y, z = self.pos.to_list()
        return {
            'timestamp': self.timestamp,
            'event_type': self.event_type,
            'x': x,
            'y': y,
            'z': z,
            'wear_level': self.wear_level,
            'block_code': self.block_code,
        }


class WearEventLogger:
    """
    Bounded event history plus lifetime counts per event type.

    Example:
        >>> events = WearEventLogger(max_events=100)
        >>> _ = events.log_event(1.0, STEP, BlockPos(0, 0, 0), wear_level=1)
        >>> events.get_stats()['by_type']
        {'step': 1}
    """

    CSV_COLUMNS = [
        'timestamp', 'event_type', 'x', 'y', 'z', 'wear_level', 'block_code',
    ]

    def __init__(self, max_events: int = 10000):
        self.max_events = max_events
        self._events: Deque[WearEventRecord] = deque(maxlen=max_events)
        self._by_type: Counter = Counter()

    def log_event(self, timestamp: float, event_type: str, pos: BlockPos,
                  wear_level: int = 0, block_code: str = "",
                  **metadata) -> WearEventRecord:
        record = WearEventRecord(timestamp, event_type, pos, wear_level,
                                 block_code, metadata)
        self._events.append(record)
        self._by_type[event_type] += 1
        return record

    # =========================================================================
    # Queries
    # =========================================================================

    def get_all(self) -> List[WearEventRecord]:
        return list(self._events)

    def get_by_type(self, event_type: str) -> List[WearEventRecord]:
        return [e for e in self._events if e.event_type == event_type]

    def get_by_pos(self, pos: BlockPos) -> List[WearEventRecord]:
        """History of a single cell, oldest first."""
        return [e for e in self._events if e.pos == pos]

    def get_in_range(self, start_time: float, end_time: float) -> List[WearEventRecord]:
        return [e for e in self._events if start_time <= e.timestamp <= end_time]

    def last_of_type(self, event_type: str) -> Optional[WearEventRecord]:
        return next((e for e in reversed(self._events) if e.event_type == event_type), None)

    @property
    def total_logged(self) -> int:
        """Events ever logged, including ones pushed out of the history."""
        return sum(self._by_type.values())

    def count_of(self, event_type: str) -> int:
        return self._by_type[event_type]

    def get_stats(self) -> Dict[str, Any]:
        return {
            'stored_events': len(self._events),
            'total_logged': self.total_logged,
            'by_type': dict(self._by_type),
        }

    # =========================================================================
    # Export
    # =========================================================================

    def to_csv(self, include_header: bool = True) -> str:
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=self.CSV_COLUMNS)
        if include_header:
            writer.writeheader()
        writer.writerows(e.to_dict() for e in self._events)
        return buffer.getvalue()

    def to_json(self, pretty: bool = False) -> str:
        rows = []
        for event in self._events:
            row = event.to_dict()
            row['metadata'] = event.metadata
            rows.append(row)
        return json.dumps(rows, indent=2 if pretty else None)

    def clear(self) -> None:
        """Drop the history; lifetime counts are kept."""
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"WearEventLogger(stored={len(self._events)}, total={self.total_logged})"
