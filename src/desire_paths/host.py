"""
Host environment for Desire Paths.

The engine is driven entirely by host callbacks: a periodic tick
listener, player joins, and world save/load. This module defines the
event surface the engine registers against, plus a small simulated
server that delivers those callbacks one at a time. The simulator is
what the tests and ``simulate.py`` run against.

Anything passed to ``DesirePathsEngine.start`` must provide:
    calendar        object with ``total_hours``
    block_accessor  a ``BlockAccessor``
    save_game       object with ``get_data(key)`` / ``store_data(key, blob)``
    events          a ``HostEvents``
    online_players  list of players with an ``entity``
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .core.clock import WorldCalendar
from .core.state import BlockPos
from .output.save_data import SaveGame
from .wear.terrain import BlockAccessor, GridBlockAccessor


@dataclass
class TickListener:
    """A registered periodic callback."""
    listener_id: int
    callback: Callable[[float], Any]
    interval_ms: int
    next_due_ms: float


class HostEvents:
    """
    Callback registry of the host.

    Tick listeners receive the elapsed seconds since their previous call.
    The lifecycle lists are plain lists of callables, appended to by
    subscribers.
    """

    def __init__(self):
        self._listeners: Dict[int, TickListener] = {}
        self._next_id = 1
        self._elapsed_ms = 0.0

        self.player_join: List[Callable[['SimulatedPlayer'], Any]] = []
        self.save_game_loaded: List[Callable[[], Any]] = []
        self.game_world_save: List[Callable[[], Any]] = []

    def register_tick_listener(self, callback: Callable[[float], Any],
                               interval_ms: int) -> int:
        """Call ``callback`` every ``interval_ms``. Returns the listener id."""
        listener = TickListener(
            listener_id=self._next_id,
            callback=callback,
            interval_ms=interval_ms,
            next_due_ms=self._elapsed_ms + interval_ms,
        )
        self._listeners[listener.listener_id] = listener
        self._next_id += 1
        return listener.listener_id

    def unregister_tick_listener(self, listener_id: int) -> bool:
        return self._listeners.pop(listener_id, None) is not None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def advance(self, elapsed_ms: float) -> int:
        """
        Move host time forward and fire every listener that came due.

        A listener that is overdue several times over fires once per
        missed interval.

        Returns:
            Number of listener invocations
        """
        self._elapsed_ms += elapsed_ms
        fired = 0

        for listener in list(self._listeners.values()):
            while (listener.listener_id in self._listeners
                   and listener.next_due_ms <= self._elapsed_ms):
                listener.next_due_ms += listener.interval_ms
                listener.callback(listener.interval_ms / 1000.0)
                fired += 1

        return fired

    def fire_player_join(self, player: 'SimulatedPlayer') -> None:
        for handler in list(self.player_join):
            handler(player)

    def fire_save_game_loaded(self) -> None:
        for handler in list(self.save_game_loaded):
            handler()

    def fire_game_world_save(self) -> None:
        for handler in list(self.game_world_save):
            handler()


@dataclass
class EntityPos:
    """Continuous entity position in world units."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_block_pos(self) -> BlockPos:
        """Cell containing this position."""
        return BlockPos(math.floor(self.x), math.floor(self.y), math.floor(self.z))


@dataclass
class Entity:
    """A player entity with attached behaviors."""
    pos: EntityPos = field(default_factory=EntityPos)
    behaviors: List[Any] = field(default_factory=list)

    def add_behavior(self, behavior: Any) -> None:
        self.behaviors.append(behavior)

    def remove_behavior(self, behavior: Any) -> bool:
        if behavior in self.behaviors:
            self.behaviors.remove(behavior)
            return True
        return False

    def get_behavior(self, name: str) -> Optional[Any]:
        for behavior in self.behaviors:
            if behavior.property_name() == name:
                return behavior
        return None

    def move_to(self, x: float, y: float, z: float) -> None:
        self.pos = EntityPos(x, y, z)

    def on_game_tick(self, delta_time: float) -> None:
        for behavior in list(self.behaviors):
            behavior.on_game_tick(delta_time)


@dataclass
class SimulatedPlayer:
    """An online player."""
    player_uid: str
    entity: Optional[Entity] = field(default_factory=Entity)


class SimulatedHost:
    """
    Single-threaded stand-in for the game server.

    Example:
        >>> host = SimulatedHost()
        >>> engine = DesirePathsEngine()
        >>> engine.start(host)
        >>> player = host.join("walker")
        >>> player.entity.move_to(3.5, 4.0, 3.5)
        >>> host.advance(50)
    """

    def __init__(self,
                 block_accessor: Optional[BlockAccessor] = None,
                 calendar: Optional[WorldCalendar] = None,
                 save_game: Optional[SaveGame] = None):
        self.block_accessor = block_accessor or GridBlockAccessor()
        self.calendar = calendar or WorldCalendar()
        self.save_game = save_game or SaveGame()
        self.events = HostEvents()
        self.online_players: List[SimulatedPlayer] = []

    def join(self, player_uid: str, x: float = 0.5, y: float = 0.0,
             z: float = 0.5) -> SimulatedPlayer:
        """Bring a player online at a position and fire the join event."""
        player = SimulatedPlayer(player_uid=player_uid,
                                 entity=Entity(pos=EntityPos(x, y, z)))
        self.online_players.append(player)
        self.events.fire_player_join(player)
        return player

    def leave(self, player_uid: str) -> None:
        self.online_players = [p for p in self.online_players
                               if p.player_uid != player_uid]

    def advance(self, elapsed_ms: float) -> int:
        """
        Run one server tick.

        Advances the calendar, ticks every player entity, then fires any
        due tick listeners.

        Returns:
            Number of listener invocations
        """
        self.calendar.advance(elapsed_ms)

        delta_time = elapsed_ms / 1000.0
        for player in list(self.online_players):
            if player.entity is not None:
                player.entity.on_game_tick(delta_time)

        return self.events.advance(elapsed_ms)

    def save(self) -> None:
        self.events.fire_game_world_save()

    def load(self) -> None:
        self.events.fire_save_game_loaded()

    def __repr__(self) -> str:
        return (
            f"SimulatedHost(players={len(self.online_players)}, "
            f"listeners={self.events.listener_count}, {self.calendar!r})"
        )
