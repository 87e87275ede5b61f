"""Dispatch – EventSink port and InMemoryEventSink."""

from __future__ import annotations

import abc
import dataclasses
from collections import Counter, defaultdict
from collections.abc import Sequence
from datetime import UTC, date, datetime

from audit_ingest.application.queries import DailySeverityCounts, EventQueries, EventStats
from audit_ingest.kernel.events import Event, Severity
from audit_ingest.kernel.time import Clock, SystemClock


class EventSink(abc.ABC):
    """Port – durable, atomic batch storage for events.

    The dispatcher calls :meth:`write` from a single task, never
    concurrently with itself, with batches of 1..``batch_size`` events.
    """

    @abc.abstractmethod
    async def write(self, batch: Sequence[Event]) -> None:
        """Commit every event in *batch* or none of them.

        Raises :class:`~audit_ingest.kernel.errors.SinkError` on failure.
        """

    @abc.abstractmethod
    async def ping(self) -> None:
        """Raise :class:`~audit_ingest.kernel.errors.HealthCheckError` when unreachable."""

    async def close(self) -> None:
        """Release connections; the default has nothing to release."""


class InMemoryEventSink(EventSink, EventQueries):
    """List-backed sink for local development and unit tests."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._events: list[Event] = []

    async def write(self, batch: Sequence[Event]) -> None:
        now = self._clock.now()
        self._events.extend(
            event if event.created_at else dataclasses.replace(event, created_at=now)
            for event in batch
        )

    async def ping(self) -> None:
        return None

    async def recent(self, *, limit: int = 100, offset: int = 0) -> list[Event]:
        ordered = sorted(self._events, key=lambda e: e.occurred_at, reverse=True)
        return ordered[offset : offset + limit]

    async def stats_between(self, start: datetime, end: datetime | None = None) -> EventStats:
        window = [
            e for e in self._events if e.occurred_at >= start and (end is None or e.occurred_at < end)
        ]
        return EventStats(
            total_events=len(window),
            warnings=sum(1 for e in window if e.severity is Severity.MEDIUM),
            errors=sum(1 for e in window if e.severity in (Severity.HIGH, Severity.CRITICAL)),
            unique_users=len({e.user_id for e in window if e.user_id is not None}),
        )

    async def daily_severity_counts(self, since: datetime) -> list[DailySeverityCounts]:
        days: defaultdict[date, Counter[str]] = defaultdict(Counter)
        for e in self._events:
            if e.occurred_at >= since:
                days[e.occurred_at.astimezone(UTC).date()][e.severity.value] += 1
        return [DailySeverityCounts(day=day, **counts) for day, counts in sorted(days.items())]

    def all(self) -> list[Event]:
        """Return all stored events in write order (helper for test assertions)."""
        return list(self._events)


__all__ = ["EventSink", "InMemoryEventSink"]
