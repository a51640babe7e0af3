"""
Wear accumulation on visit.
"""

from typing import Optional

from ..core.state import BlockPos, WearRecord, WearStore
from ..output.debug_logger import DebugLogger
from ..output.event_logger import WearEventLogger, STEP
from .effects import DeferredEffectQueue


class WearAccumulator:
    """
    Applies "a player stepped here" to the wear store.

    Example:
        >>> accumulator = WearAccumulator(store, queue)
        >>> record = accumulator.record_visit(BlockPos(1, 3, 1), 12.0, "game:soil-medium-normal")
        >>> record.wear_level
        1
    """

    def __init__(self,
                 store: WearStore,
                 queue: DeferredEffectQueue,
                 logger: Optional[DebugLogger] = None,
                 events: Optional[WearEventLogger] = None):
        self.store = store
        self.queue = queue
        self.logger = logger or DebugLogger()
        self.events = events or WearEventLogger()

    def record_visit(self, pos: BlockPos, now: float,
                     current_block_code: str) -> WearRecord:
        """
        Add one point of wear to ``pos``.

        The first visit creates the record and captures
        ``current_block_code`` as the block to revert to later; later
        visits never touch it. The cell is queued for a deferred path
        conversion check if it is not queued already.

        Args:
            pos: Cell that was stepped on
            now: World time in hours
            current_block_code: Code of the block at ``pos`` right now

        Returns:
            The updated record
        """
        record = self.store.get(pos)
        if record is None:
            record = WearRecord(
                wear_level=0,
                last_update_hours=now,
                original_block_code=current_block_code,
            )
            self.store.put(pos, record)

        record.wear_level += 1
        record.last_update_hours = now

        self.queue.add(pos)

        self.logger.info("wear", f"Player stepped on {pos} wear={record.wear_level}", now)
        self.events.log_event(now, STEP, pos, record.wear_level,
                              record.original_block_code)
        return record
