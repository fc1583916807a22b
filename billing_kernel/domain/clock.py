"""
Clock -- injectable source of "now" for the billing kernel.

Responsibility:
    Aggregation and reporting never call ``datetime.now()`` or
    ``date.today()`` directly.  The current period that report buckets end
    at, default invoice issue dates and report ``generated_at`` stamps all
    come from an injected Clock.

Architecture position:
    Kernel > Domain.  SystemClock is the one sanctioned I/O boundary for
    time; everything else receives a Clock.

Invariants enforced:
    - ``now()`` is always timezone-aware UTC.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""
        ...

    def today(self) -> date:
        """Calendar date of ``now()`` in UTC."""
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Contract:
        ``now()`` returns the same value on repeated calls until ``advance()``
        or ``set_time()`` is called.

    Raises:
        ValueError: If given a naive datetime.
    """

    DEFAULT_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._current = self._aware(fixed_time or self.DEFAULT_TIME)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError(f"DeterministicClock needs a timezone-aware datetime, got {value!r}")
        return value.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = self._aware(time)

    def advance(self, seconds: int = 1, *, days: int = 0) -> None:
        """Move forward; ``days`` makes month-boundary tests easy to read."""
        self._current += timedelta(days=days, seconds=seconds)
