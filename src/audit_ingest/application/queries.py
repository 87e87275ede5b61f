"""Application – read-side queries over persisted events."""

from __future__ import annotations

import abc
import asyncio
import dataclasses
from datetime import date, datetime, timedelta
from typing import Any

from audit_ingest.kernel.events import Event

MAX_PAGE_SIZE = 1000


@dataclasses.dataclass(frozen=True)
class EventStats:
    """Aggregate counters for events that occurred inside a window.

    ``warnings`` counts medium-severity events; ``errors`` counts high and
    critical ones.
    """

    total_events: int = 0
    warnings: int = 0
    errors: int = 0
    unique_users: int = 0

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


def percent_change(current: int, previous: int) -> float:
    """Change from *previous* to *current* in percent; 100 when counting up from zero."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


@dataclasses.dataclass(frozen=True)
class StatsComparison:
    """Counters for a window next to the equally long window before it."""

    current: EventStats
    previous: EventStats

    def percent_change(self) -> dict[str, float]:
        previous = self.previous.to_dict()
        return {name: percent_change(value, previous[name]) for name, value in self.current.to_dict().items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.current.to_dict(),
            "previous": self.previous.to_dict(),
            "percent_change": self.percent_change(),
        }


@dataclasses.dataclass(frozen=True)
class DailySeverityCounts:
    """Events per severity for one calendar day (UTC)."""

    day: date
    low: int = 0
    medium: int = 0
    high: int = 0
    critical: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "low": self.low,
            "medium": self.medium,
            "high": self.high,
            "critical": self.critical,
        }


class EventQueries(abc.ABC):
    """Port – read access to stored events."""

    @abc.abstractmethod
    async def recent(self, *, limit: int = 100, offset: int = 0) -> list[Event]:
        """Return events ordered newest ``occurred_at`` first."""

    @abc.abstractmethod
    async def stats_between(self, start: datetime, end: datetime | None = None) -> EventStats:
        """Aggregate events with ``start <= occurred_at < end``; no upper bound when *end* is ``None``."""

    async def stats_since(self, since: datetime) -> EventStats:
        return await self.stats_between(since)

    async def compare_windows(self, since: datetime, width: timedelta) -> StatsComparison:
        """Stats from *since* on against ``[since - width, since)``."""
        current, previous = await asyncio.gather(
            self.stats_between(since),
            self.stats_between(since - width, since),
        )
        return StatsComparison(current=current, previous=previous)

    @abc.abstractmethod
    async def daily_severity_counts(self, since: datetime) -> list[DailySeverityCounts]:
        """Per-day severity counts for events with ``occurred_at >= since``, oldest day first."""


__all__ = [
    "DailySeverityCounts",
    "EventQueries",
    "EventStats",
    "MAX_PAGE_SIZE",
    "StatsComparison",
    "percent_change",
]
