"""
Periodic decay sweep.

Every ``decay_interval_ms`` the host calls ``DecaySweeper.tick`` with the
current world time. Each tracked cell is processed independently:

1. Staleness decay. A cell untouched for more than ``stale_after_hours``
   loses one wear point and has its timestamp reset to ``now``, so a
   neglected cell drips down by one point per stale interval rather
   than on every tick.
2. Plant removal. A plant standing on a cell with at least
   ``plant_kill_threshold`` wear is cleared. Repeating this on an empty
   cell does nothing.
3. Reversion. A cell at zero wear or below gets its original block back
   (when that code still resolves) and is dropped from the store.

Deletions are collected during the scan and applied afterward.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config.models import DesirePathsConfig
from ..core.state import BlockPos, WearRecord, WearStore
from ..output.debug_logger import DebugLogger
from ..output.event_logger import WearEventLogger, PLANT_CLEARED, REVERTED, REMOVED
from .terrain import AIR_BLOCK_ID, BlockAccessor, BlockMaterial


@dataclass
class SweepResult:
    """What one sweep did."""
    now: float = 0.0
    scanned: int = 0
    decayed: int = 0
    plants_cleared: int = 0
    reverted: int = 0
    removed: List[BlockPos] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            'now': self.now,
            'scanned': self.scanned,
            'decayed': self.decayed,
            'plants_cleared': self.plants_cleared,
            'reverted': self.reverted,
            'removed': len(self.removed),
        }


class DecaySweeper:
    """
    Decays, cleans up and reverts worn cells.

    Example:
        >>> sweeper = DecaySweeper(store, accessor)
        >>> result = sweeper.tick(now=100.0)
        >>> result.scanned == len(store) + len(result.removed)
        True
    """

    def __init__(self,
                 store: WearStore,
                 accessor: BlockAccessor,
                 config: Optional[DesirePathsConfig] = None,
                 logger: Optional[DebugLogger] = None,
                 events: Optional[WearEventLogger] = None):
        self.store = store
        self.accessor = accessor
        self.config = config or DesirePathsConfig()
        self.logger = logger or DebugLogger()
        self.events = events or WearEventLogger()

    def tick(self, now: float) -> SweepResult:
        """
        Run one sweep over every record.

        Args:
            now: World time in hours

        Returns:
            Summary of the sweep
        """
        result = SweepResult(now=now)
        to_remove: List[BlockPos] = []

        for pos, record in self.store:
            result.scanned += 1

            if self._decay(record, now):
                result.decayed += 1

            if self._clear_plant(pos, record, now):
                result.plants_cleared += 1

            if record.wear_level <= 0:
                if self._revert(pos, record, now):
                    result.reverted += 1
                to_remove.append(pos)

        for pos in to_remove:
            self.store.remove(pos)
            self.events.log_event(now, REMOVED, pos)

        result.removed = to_remove
        self.logger.trace("decay", "Sweep", now, **result.to_dict())
        return result

    def _decay(self, record: WearRecord, now: float) -> bool:
        if now - record.last_update_hours > self.config.stale_after_hours:
            record.wear_level -= 1
            record.last_update_hours = now
            return True
        return False

    def _clear_plant(self, pos: BlockPos, record: WearRecord, now: float) -> bool:
        if record.wear_level < self.config.plant_kill_threshold:
            return False

        above = pos.up()
        block = self.accessor.get_block(above)
        if block.material != BlockMaterial.PLANT:
            return False

        self.accessor.set_block(AIR_BLOCK_ID, above)
        self.logger.debug("decay", f"Trampled {block.code} at {above}", now,
                          wear=record.wear_level)
        self.events.log_event(now, PLANT_CLEARED, above, record.wear_level, block.code)
        return True

    def _revert(self, pos: BlockPos, record: WearRecord, now: float) -> bool:
        if not record.original_block_code:
            return False

        original = self.accessor.get_block_by_code(record.original_block_code)
        if original is None:
            self.logger.debug("decay", f"Cannot resolve {record.original_block_code}, "
                              f"leaving {pos} as is", now)
            return False

        self.accessor.exchange_block(original.block_id, pos)
        self.logger.info("decay", f"Reverting {pos} back to {original.code}", now)
        self.events.log_event(now, REVERTED, pos, record.wear_level, original.code)
        return True
