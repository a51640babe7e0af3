"""
Wear lifecycle for Desire Paths.

- WearAccumulator: wear on every step
- DecaySweeper: periodic decay, plant removal and reversion
- DeferredEffectQueue: path conversion once the player has moved away
- PlayerPathObserver: per-player step detection
- terrain: block model and the host block accessor interface
"""

from .terrain import (
    Block,
    BlockMaterial,
    BlockRegistry,
    BlockAccessor,
    GridBlockAccessor,
    create_default_registry,
    AIR_BLOCK_ID,
)
from .effects import DeferredEffectQueue, is_soil_like
from .accumulator import WearAccumulator
from .sweeper import DecaySweeper, SweepResult
from .observer import PlayerPathObserver, cell_below

__all__ = [
    'Block',
    'BlockMaterial',
    'BlockRegistry',
    'BlockAccessor',
    'GridBlockAccessor',
    'create_default_registry',
    'AIR_BLOCK_ID',
    'DeferredEffectQueue',
    'is_soil_like',
    'WearAccumulator',
    'DecaySweeper',
    'SweepResult',
    'PlayerPathObserver',
    'cell_below',
]
