"""
Debug logging for Desire Paths.

Entries are kept in a bounded in-memory buffer and can be echoed to a
stream. Timestamps are world hours. The host's notification log maps
onto INFO.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, TextIO
import json
import sys
import time


class LogLevel(Enum):
    """Severity, lowest first."""
    TRACE = 0    # Every sweep
    DEBUG = 1    # Skipped effects, silent degradations
    INFO = 2     # Steps, reversions, save/load
    WARNING = 3
    ERROR = 4
    NONE = 5


@dataclass
class LogEntry:
    timestamp: float
    level: LogLevel
    category: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def format(self, include_data: bool = True) -> str:
        """One line: ``[    12.50h] INFO  wear     message (k=v)``."""
        text = (f"[{self.timestamp:10.2f}h] {self.level.name:<5} "
                f"{self.category:<8} {self.message}")
        if include_data and self.data:
            pairs = ", ".join(f"{k}={v}" for k, v in self.data.items())
            text = f"{text} ({pairs})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'level': self.level.name,
            'category': self.category,
            'message': self.message,
            'data': self.data,
        }


# ANSI styles per level for console echo
_STYLES = {
    LogLevel.TRACE: '\033[90m',
    LogLevel.DEBUG: '\033[37m',
    LogLevel.INFO: '\033[32m',
    LogLevel.WARNING: '\033[33m',
    LogLevel.ERROR: '\033[31m',
}
_RESET = '\033[0m'


class DebugLogger:
    """
    Leveled, categorized logger for the wear engine.

    Categories in use: ``engine``, ``wear``, ``decay``, ``effect``, ``save``.

    Example:
        >>> logger = DebugLogger(level=LogLevel.DEBUG)
        >>> entry = logger.info("wear", "Player stepped on X=1,Y=2,Z=3", 10.0, wear=4)
        >>> entry.data["wear"]
        4
        >>> logger.set_category_filter(["save"])
        >>> logger.info("wear", "filtered out") is None
        True
    """

    def __init__(self,
                 level: LogLevel = LogLevel.INFO,
                 output: Optional[TextIO] = None,
                 use_colors: bool = True,
                 max_entries: int = 10000,
                 prefix: str = "[DesirePaths]"):
        """
        Args:
            level: Entries below this level are dropped
            output: Stream to echo entries to, None for silent
            use_colors: Style console echo with ANSI codes
            max_entries: Buffer size; oldest entries are discarded first
            prefix: Tag written before every echoed line
        """
        self.level = level
        self.output = output
        self.use_colors = use_colors
        self.max_entries = max_entries
        self.prefix = prefix

        self._entries: List[LogEntry] = []
        self._categories: Optional[set] = None
        self._callbacks: List[Callable[[LogEntry], Any]] = []
        self._timings: Dict[str, List[float]] = {}

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def set_category_filter(self, categories: Optional[List[str]]) -> None:
        """Record only these categories; None records everything."""
        self._categories = set(categories) if categories is not None else None

    def add_callback(self, callback: Callable[[LogEntry], Any]) -> None:
        """Call ``callback(entry)`` for every recorded entry."""
        self._callbacks.append(callback)

    # =========================================================================
    # Recording
    # =========================================================================

    def _accepts(self, level: LogLevel, category: str) -> bool:
        if level.value < self.level.value:
            return False
        return self._categories is None or category in self._categories

    def log(self, level: LogLevel, category: str, message: str,
            timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        """
        Record an entry.

        Returns:
            The entry, or None if the level or category filter dropped it
        """
        if not self._accepts(level, category):
            return None

        entry = LogEntry(timestamp, level, category, message, data)
        self._entries.append(entry)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            del self._entries[:overflow]

        if self.output is not None:
            self._echo(entry)
        for callback in self._callbacks:
            callback(entry)
        return entry

    def trace(self, category: str, message: str, timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        return self.log(LogLevel.TRACE, category, message, timestamp, **data)

    def debug(self, category: str, message: str, timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, category, message, timestamp, **data)

    def info(self, category: str, message: str, timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, category, message, timestamp, **data)

    def warning(self, category: str, message: str, timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        return self.log(LogLevel.WARNING, category, message, timestamp, **data)

    def error(self, category: str, message: str, timestamp: float = 0.0, **data) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, category, message, timestamp, **data)

    def _echo(self, entry: LogEntry) -> None:
        line = entry.format()
        if self.use_colors:
            line = f"{_STYLES.get(entry.level, '')}{line}{_RESET}"
        if self.prefix:
            line = f"{self.prefix} {line}"
        self.output.write(line + "\n")
        self.output.flush()

    # =========================================================================
    # Timing
    # =========================================================================

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """Measure the wall-clock duration of a block under ``name``."""
        start = time.perf_counter()
        try:
            yield
        finally:
            samples = self._timings.setdefault(name, [])
            samples.append((time.perf_counter() - start) * 1000.0)
            if len(samples) > 1000:
                del samples[:-1000]

    def timing_stats(self, name: str) -> Dict[str, float]:
        """Average, min and max milliseconds for a timed block."""
        samples = self._timings.get(name)
        if not samples:
            return {'avg_ms': 0.0, 'min_ms': 0.0, 'max_ms': 0.0, 'samples': 0}
        return {
            'avg_ms': sum(samples) / len(samples),
            'min_ms': min(samples),
            'max_ms': max(samples),
            'samples': len(samples),
        }

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entries(self, level: Optional[LogLevel] = None,
                    category: Optional[str] = None,
                    count: Optional[int] = None) -> List[LogEntry]:
        """Entries at or above ``level`` in ``category``, the last ``count`` of them."""
        entries = [
            e for e in self._entries
            if (level is None or e.level.value >= level.value)
            and (category is None or e.category == category)
        ]
        return entries[-count:] if count else entries

    def get_recent(self, count: int = 20) -> List[LogEntry]:
        return self._entries[-count:]

    def search(self, text: str) -> List[LogEntry]:
        """Entries whose message contains ``text``, case-insensitive."""
        needle = text.lower()
        return [e for e in self._entries if needle in e.message.lower()]

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps([e.to_dict() for e in self._entries],
                          indent=2 if pretty else None)

    @property
    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self._timings.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DebugLogger(entries={len(self._entries)}, level={self.level.name})"


def create_console_logger(level: LogLevel = LogLevel.INFO,
                          use_colors: bool = True) -> DebugLogger:
    """Logger that echoes to stdout."""
    return DebugLogger(level=level, output=sys.stdout, use_colors=use_colors)
