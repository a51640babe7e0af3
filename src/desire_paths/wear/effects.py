"""
Deferred terrain conversion.

Turning the ground into a path right under a player's feet looks wrong,
so a visited cell is only queued. The conversion check runs once some
player is at least ``release_distance`` blocks away from the cell, after
which the cell leaves the queue whether or not it converted.

Any player's movement can release any queued cell; the queue does not
remember who walked there.
"""

from typing import Dict, List, Optional

from ..config.models import DesirePathsConfig
from ..core.state import BlockPos, WearStore
from ..output.debug_logger import DebugLogger
from ..output.event_logger import WearEventLogger, CONVERTED
from .terrain import Block, BlockAccessor, BlockMaterial


def is_soil_like(block: Block, keywords: List[str]) -> bool:
    """
    True if a block can be worn into a path.

    Soil material always qualifies; otherwise the code path is checked
    for any of the keywords (``soil``, ``dirt``, ``grass`` by default).
    """
    if block.material == BlockMaterial.SOIL:
        return True
    path = block.path
    return any(word in path for word in keywords)


class DeferredEffectQueue:
    """
    Cells waiting for their path conversion to be evaluated.

    Example:
        >>> queue = DeferredEffectQueue(store, accessor)
        >>> queue.add(BlockPos(0, 3, 0))
        True
        >>> queue.release_if_far(BlockPos(40, 3, 0))
        [BlockPos(x=0, y=3, z=0)]
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

        # dict keeps insertion order and rejects duplicates
        self._pending: Dict[BlockPos, None] = {}

    def add(self, pos: BlockPos) -> bool:
        """Queue a cell. Returns False if it was already queued."""
        if pos in self._pending:
            return False
        self._pending[pos] = None
        return True

    def discard(self, pos: BlockPos) -> None:
        self._pending.pop(pos, None)

    def pending(self) -> List[BlockPos]:
        return list(self._pending)

    def clear(self) -> None:
        self._pending.clear()

    def apply_path_effect(self, pos: BlockPos, wear_level: int,
                          now: float = 0.0) -> bool:
        """
        Convert the ground at ``pos`` to the worn-path block if warranted.

        Below ``dirt_path_threshold`` nothing happens; earlier conversions
        are never undone here, only by the decay sweep.

        Returns:
            True if the block was exchanged
        """
        cfg = self.config
        if wear_level < cfg.dirt_path_threshold:
            return False

        ground = self.accessor.get_block(pos)
        path_block = self.accessor.get_block_by_code(cfg.path_block_code)

        if path_block is None:
            self.logger.debug("effect", f"Path block {cfg.path_block_code} not registered",
                              now, pos=pos)
            return False

        if ground.block_id == path_block.block_id:
            return False

        if not is_soil_like(ground, cfg.soil_keywords):
            self.logger.debug("effect", f"Not soil-like, leaving {pos}", now,
                              block=ground.code)
            return False

        self.accessor.exchange_block(path_block.block_id, pos)
        self.logger.info("effect", f"Worn path at {pos}", now,
                         wear=wear_level, was=ground.code)
        self.events.log_event(now, CONVERTED, pos, wear_level, path_block.code,
                              previous=ground.code)
        return True

    def release_if_far(self, actor_pos: BlockPos, now: float = 0.0) -> List[BlockPos]:
        """
        Evaluate and release every queued cell far enough from ``actor_pos``.

        Returns:
            Cells released by this call
        """
        threshold = self.config.release_distance_sq
        released = []

        for pos in list(self._pending):
            if pos.distance_sq(actor_pos) < threshold:
                continue

            record = self.store.get(pos)
            if record is not None:
                self.apply_path_effect(pos, record.wear_level, now)
            else:
                self.logger.debug("effect", f"Record for {pos} gone, dropping", now)

            del self._pending[pos]
            released.append(pos)

        return released

    def __contains__(self, pos: object) -> bool:
        return pos in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"DeferredEffectQueue(pending={len(self._pending)})"
