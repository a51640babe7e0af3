"""
Wear state for Desire Paths.

Defines the block coordinate type, the per-cell wear record and the
store that maps one to the other. The store is owned by the engine and
only mutated from host callbacks, so it carries no locking.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True, order=True)
class BlockPos:
    """
    Integer address of a single world cell.

    Example:
        >>> pos = BlockPos(10, 4, -3)
        >>> pos.up()
        BlockPos(x=10, y=5, z=-3)
        >>> pos.distance_sq(BlockPos(13, 4, 1))
        25
    """
    x: int
    y: int
    z: int

    def up(self, dy: int = 1) -> 'BlockPos':
        """Cell directly above this one."""
        return BlockPos(self.x, self.y + dy, self.z)

    def down(self, dy: int = 1) -> 'BlockPos':
        """Cell directly below this one."""
        return BlockPos(self.x, self.y - dy, self.z)

    def distance_sq(self, other: 'BlockPos') -> int:
        """Squared Euclidean distance to another cell."""
        dx = other.x - self.x
        dy = other.y - self.y
        dz = other.z - self.z
        return dx * dx + dy * dy + dz * dz

    def to_list(self) -> List[int]:
        return [self.x, self.y, self.z]

    @classmethod
    def from_list(cls, values) -> 'BlockPos':
        x, y, z = values
        return cls(int(x), int(y), int(z))

    def __str__(self) -> str:
        return f"X={self.x},Y={self.y},Z={self.z}"


@dataclass
class WearRecord:
    """
    Accumulated foot traffic on one cell.

    Attributes:
        wear_level: Usage counter. Can reach zero or below while decaying,
            at which point the sweep removes the record.
        last_update_hours: World time (hours) of the last wear change
        original_block_code: Block code of the ground before any
            conversion, captured on first visit
    """
    wear_level: int = 0
    last_update_hours: float = 0.0
    original_block_code: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            'wear_level': self.wear_level,
            'last_update_hours': self.last_update_hours,
            'original_block_code': self.original_block_code,
        }


class WearStore:
    """
    Mapping from cell to wear record.

    Iterating yields ``(pos, record)`` pairs over a copy of the items, so
    callers may remove entries while scanning. The sweep still collects
    its deletions and applies them afterward.

    Example:
        >>> store = WearStore()
        >>> store.put(BlockPos(0, 0, 0), WearRecord(wear_level=3))
        >>> store.get(BlockPos(0, 0, 0)).wear_level
        3
        >>> len(store)
        1
    """

    def __init__(self, records: Optional[Dict[BlockPos, WearRecord]] = None):
        self._records: Dict[BlockPos, WearRecord] = dict(records or {})

    def get(self, pos: BlockPos) -> Optional[WearRecord]:
        """Get the record for a cell, or None if it is not tracked."""
        return self._records.get(pos)

    def put(self, pos: BlockPos, record: WearRecord) -> None:
        """Insert or replace the record for a cell."""
        self._records[pos] = record

    def remove(self, pos: BlockPos) -> Optional[WearRecord]:
        """Remove a cell's record. Removing an untracked cell is a no-op."""
        return self._records.pop(pos, None)

    def items(self) -> List[Tuple[BlockPos, WearRecord]]:
        return list(self._records.items())

    def positions(self) -> List[BlockPos]:
        return list(self._records.keys())

    def replace(self, records: Dict[BlockPos, WearRecord]) -> None:
        """Replace the whole map, as done on world load."""
        self._records = dict(records)

    def snapshot(self) -> Dict[BlockPos, WearRecord]:
        """Shallow copy of the whole map, as done on world save."""
        return dict(self._records)

    def clear(self) -> None:
        self._records.clear()

    def __iter__(self) -> Iterator[Tuple[BlockPos, WearRecord]]:
        return iter(self.items())

    def __contains__(self, pos: object) -> bool:
        return pos in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"WearStore(records={len(self._records)})"
