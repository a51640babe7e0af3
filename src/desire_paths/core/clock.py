"""
World calendar for Desire Paths.

The wear engine only ever needs a monotonically increasing number of
in-game hours. The calendar converts real milliseconds delivered by the
host into game hours at a configurable speed.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class WorldCalendar:
    """
    Monotonic world clock measured in game hours.

    Attributes:
        total_hours: Hours elapsed since world creation
        hours_per_day: Length of one game day in hours
        speed_hours_per_minute: Game hours that pass per real minute

    Example:
        >>> calendar = WorldCalendar(speed_hours_per_minute=2.0)
        >>> calendar.advance(30_000)
        1.0
        >>> calendar.day
        0
    """

    total_hours: float = 0.0
    hours_per_day: float = 24.0
    speed_hours_per_minute: float = 1.0

    _paused: bool = False

    @property
    def day(self) -> int:
        """Whole game days elapsed."""
        return int(self.total_hours // self.hours_per_day)

    @property
    def hour_of_day(self) -> float:
        return self.total_hours % self.hours_per_day

    @property
    def is_paused(self) -> bool:
        return self._paused

    def advance(self, elapsed_ms: float) -> float:
        """
        Advance the calendar by an amount of real time.

        Args:
            elapsed_ms: Real milliseconds that passed

        Returns:
            The new total hours
        """
        if self._paused or elapsed_ms <= 0:
            return self.total_hours

        minutes = elapsed_ms / 60_000.0
        self.total_hours += minutes * self.speed_hours_per_minute
        return self.total_hours

    def add_hours(self, hours: float) -> float:
        """Skip ahead by a number of game hours (sleeping, commands)."""
        if hours > 0:
            self.total_hours += hours
        return self.total_hours

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def reset(self, total_hours: float = 0.0) -> None:
        self.total_hours = total_hours
        self._paused = False

    def get_state(self) -> Dict:
        """Get calendar state for serialization."""
        return {
            'total_hours': self.total_hours,
            'hours_per_day': self.hours_per_day,
            'speed_hours_per_minute': self.speed_hours_per_minute,
            'paused': self._paused,
        }

    def set_state(self, state: Dict) -> None:
        """Restore calendar state from serialization."""
        self.total_hours = state.get('total_hours', 0.0)
        self.hours_per_day = state.get('hours_per_day', 24.0)
        self.speed_hours_per_minute = state.get('speed_hours_per_minute', 1.0)
        self._paused = state.get('paused', False)

    def format_time(self) -> str:
        """Format as 'Day N, HH:MM'."""
        hour = self.hour_of_day
        hours = int(hour)
        minutes = int((hour % 1.0) * 60)
        return f"Day {self.day}, {hours:02d}:{minutes:02d}"

    def __repr__(self) -> str:
        return (
            f"WorldCalendar(total_hours={self.total_hours:.2f}, "
            f"time={self.format_time()})"
        )
