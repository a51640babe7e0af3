"""
Per-player step detection.

Attached to every player entity. On each game tick it works out which
cell the player is standing on and, when that changes, reports the new
cell to the engine and lets the engine release queued conversions that
are now far from the player.
"""

import math
from typing import TYPE_CHECKING

from ..core.state import BlockPos

if TYPE_CHECKING:
    from ..engine import DesirePathsEngine
    from ..host import Entity


def cell_below(x: float, y: float, z: float) -> BlockPos:
    """The cell under an entity's feet."""
    return BlockPos(math.floor(x), math.floor(y) - 1, math.floor(z))


class PlayerPathObserver:
    """
    Entity behavior that turns movement into wear.

    The engine handle is passed in explicitly; there is no global
    instance to look up.
    """

    PROPERTY_NAME = "desirepathbehavior"

    def __init__(self, entity: 'Entity', engine: 'DesirePathsEngine'):
        self.entity = entity
        self.engine = engine
        pos = entity.pos
        self.last_block_pos = cell_below(pos.x, pos.y, pos.z)
        self.steps = 0

    def on_game_tick(self, delta_time: float) -> bool:
        """
        Check for a cell change.

        Returns:
            True if the player entered a new cell this tick
        """
        pos = self.entity.pos
        current = cell_below(pos.x, pos.y, pos.z)

        if current == self.last_block_pos:
            return False

        self.last_block_pos = current
        self.steps += 1
        self.engine.add_wear(current)
        self.engine.check_pending_effects_for_player(pos.as_block_pos())
        return True

    def property_name(self) -> str:
        return self.PROPERTY_NAME

    def __repr__(self) -> str:
        return f"PlayerPathObserver(last={self.last_block_pos}, steps={self.steps})"
