"""
Main Desire Paths engine.

The DesirePathsEngine is the server-side system that integrates all
components:
- Configuration loading
- The wear store and deferred conversion queue
- Step accumulation from per-player observers
- The periodic decay sweep
- World save/load of the wear map

This is the primary interface for host integration.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import DesirePathsConfig, load_config
from .core.state import BlockPos, WearRecord, WearStore
from .output.debug_logger import DebugLogger
from .output.event_logger import WearEventLogger
from .output.save_data import load_wear_map, store_wear_map
from .wear.accumulator import WearAccumulator
from .wear.effects import DeferredEffectQueue
from .wear.observer import PlayerPathObserver
from .wear.sweeper import DecaySweeper, SweepResult


@dataclass
class EngineStats:
    """Engine runtime statistics."""
    total_steps: int = 0
    total_sweeps: int = 0
    total_decayed: int = 0
    total_plants_cleared: int = 0
    total_reverted: int = 0
    total_removed: int = 0
    total_released: int = 0
    observers_attached: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_steps': self.total_steps,
            'total_sweeps': self.total_sweeps,
            'total_decayed': self.total_decayed,
            'total_plants_cleared': self.total_plants_cleared,
            'total_reverted': self.total_reverted,
            'total_removed': self.total_removed,
            'total_released': self.total_released,
            'observers_attached': self.observers_attached,
        }


class EngineNotStartedError(RuntimeError):
    """Raised when a host callback reaches an engine that was never started."""


class DesirePathsEngine:
    """
    Server-side Desire Paths system.

    Constructed once per world and handed to every player observer.

    Example:
        >>> host = SimulatedHost()
        >>> engine = DesirePathsEngine()
        >>> engine.start(host)
        >>> engine.add_wear(BlockPos(0, 3, 0)).wear_level
        1
        >>> engine.dispose()
    """

    def __init__(self,
                 config: Optional[DesirePathsConfig] = None,
                 config_path: Optional[str] = None,
                 logger: Optional[DebugLogger] = None,
                 events: Optional[WearEventLogger] = None):
        """
        Initialize the engine.

        Args:
            config: Pre-built configuration
            config_path: Directory containing desire_paths.json, used when
                ``config`` is not given
            logger: Diagnostic logger
            events: Structured wear event log
        """
        if config is not None:
            self.config = config.validate()
        elif config_path is not None:
            self.config = load_config(config_path)
        else:
            self.config = DesirePathsConfig()

        self.logger = logger or DebugLogger()
        self.events = events or WearEventLogger()
        self.store = WearStore()
        self.stats = EngineStats()

        self.api = None
        self.queue: Optional[DeferredEffectQueue] = None
        self.accumulator: Optional[WearAccumulator] = None
        self.sweeper: Optional[DecaySweeper] = None
        self._decay_listener_id: Optional[int] = None
        self._observers: List[PlayerPathObserver] = []

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, api) -> None:
        """
        Wire the engine into a host.

        Starting an engine that is already running disposes it first.
        Registers the decay ticker, the player-join hook and the save/load
        hooks, and attaches an observer to players already online.
        """
        if self.api is not None:
            self.dispose()

        self.api = api
        accessor = api.block_accessor

        self.queue = DeferredEffectQueue(self.store, accessor, self.config,
                                         self.logger, self.events)
        self.accumulator = WearAccumulator(self.store, self.queue,
                                           self.logger, self.events)
        self.sweeper = DecaySweeper(self.store, accessor, self.config,
                                    self.logger, self.events)

        self._decay_listener_id = api.events.register_tick_listener(
            self.on_decay_tick, self.config.decay_interval_ms
        )

        api.events.player_join.append(self.on_player_join)
        for player in api.online_players:
            if player is not None and player.entity is not None:
                self.attach(player.entity)

        api.events.save_game_loaded.append(self.on_save_game_loaded)
        api.events.game_world_save.append(self.on_save_game_saving)

        self.logger.info("engine", "Started", self._now(),
                         interval_ms=self.config.decay_interval_ms)

    def dispose(self) -> None:
        """
        Unregister from the host and detach every observer.

        Safe to call more than once.
        """
        if self.api is None:
            return

        events = self.api.events
        if self._decay_listener_id is not None:
            events.unregister_tick_listener(self._decay_listener_id)
            self._decay_listener_id = None

        for hooks, handler in (
            (events.player_join, self.on_player_join),
            (events.save_game_loaded, self.on_save_game_loaded),
            (events.game_world_save, self.on_save_game_saving),
        ):
            if handler in hooks:
                hooks.remove(handler)

        for observer in self._observers:
            observer.entity.remove_behavior(observer)
        self._observers = []

        self.logger.info("engine", "Disposed", self._now())
        self.api = None

    @property
    def is_running(self) -> bool:
        return self.api is not None

    def _require_started(self) -> None:
        if self.api is None:
            raise EngineNotStartedError("DesirePathsEngine.start() has not been called")

    def _now(self) -> float:
        if self.api is None:
            return 0.0
        return self.api.calendar.total_hours

    # =========================================================================
    # Host Callbacks
    # =========================================================================

    def on_player_join(self, player) -> None:
        if player is not None and player.entity is not None:
            self.attach(player.entity)

    def attach(self, entity) -> PlayerPathObserver:
        """Attach a step observer to an entity, once."""
        existing = entity.get_behavior(PlayerPathObserver.PROPERTY_NAME)
        if existing is not None:
            return existing

        observer = PlayerPathObserver(entity, self)
        entity.add_behavior(observer)
        self._observers.append(observer)
        self.stats.observers_attached += 1
        return observer

    def on_decay_tick(self, dt: float) -> SweepResult:
        """Tick listener: sweep at the current world time."""
        return self.decay_wear(self._now())

    def decay_wear(self, now: float) -> SweepResult:
        """Run one decay sweep at an explicit world time."""
        self._require_started()

        with self.logger.timed("sweep"):
            result = self.sweeper.tick(now)

        self.stats.total_sweeps += 1
        self.stats.total_decayed += result.decayed
        self.stats.total_plants_cleared += result.plants_cleared
        self.stats.total_reverted += result.reverted
        self.stats.total_removed += len(result.removed)
        return result

    def add_wear(self, pos: BlockPos) -> WearRecord:
        """Record a step on ``pos`` at the current world time."""
        self._require_started()

        current = self.api.block_accessor.get_block(pos)
        record = self.accumulator.record_visit(pos, self._now(), current.code)
        self.stats.total_steps += 1
        return record

    def check_pending_effects_for_player(self, player_pos: BlockPos) -> List[BlockPos]:
        """Release queued conversions that are far from ``player_pos``."""
        self._require_started()

        released = self.queue.release_if_far(player_pos, self._now())
        self.stats.total_released += len(released)
        return released

    def on_save_game_loaded(self) -> None:
        """Replace the wear map with the one stored in the save, if any."""
        self._require_started()

        count = load_wear_map(self.api.save_game, self.config.save_key, self.store)
        if count is not None:
            self.logger.info("save", f"Loaded {count} path entries", self._now())

    def on_save_game_saving(self) -> None:
        """Store the whole wear map in the save."""
        self._require_started()

        count = store_wear_map(self.api.save_game, self.config.save_key, self.store)
        self.logger.info("save", f"Saved {count} path entries", self._now())

    # =========================================================================
    # Inspection
    # =========================================================================

    def get_wear(self, pos: BlockPos) -> int:
        """Wear level of a cell, 0 if untracked."""
        record = self.store.get(pos)
        return record.wear_level if record is not None else 0

    def get_state(self) -> Dict[str, Any]:
        """Get engine state for inspection/logging."""
        return {
            'running': self.is_running,
            'world_hours': self._now(),
            'tracked_cells': len(self.store),
            'pending_effects': len(self.queue) if self.queue is not None else 0,
            'config': self.config.to_dict(),
            'stats': self.stats.to_dict(),
            'sweep_timing': self.logger.timing_stats("sweep"),
            'events': self.events.get_stats(),
        }

    def __repr__(self) -> str:
        return (
            f"DesirePathsEngine(running={self.is_running}, "
            f"tracked={len(self.store)}, steps={self.stats.total_steps})"
        )
