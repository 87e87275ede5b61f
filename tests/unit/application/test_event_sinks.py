"""Unit tests for InMemoryEventSink and the RecordingSink fake."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from audit_ingest.application.dispatch import InMemoryEventSink
from audit_ingest.application.queries import DailySeverityCounts, EventQueries, EventStats
from audit_ingest.kernel.errors import HealthCheckError, SinkError
from audit_ingest.kernel.events import Event
from audit_ingest.testing.fakes import FakeClock, RecordingSink


def _event(severity: str = "low", *, minutes_ago: int = 0, user_id: str | None = None) -> Event:
    clock = FakeClock()
    return Event.create(
        event_type="data_access",
        severity=severity,
        ip_address="192.0.2.7",
        occurred_at=clock.now() - timedelta(minutes=minutes_ago),
        user_id=user_id,
    )


class TestInMemoryEventSink:
    def test_is_queryable(self) -> None:
        assert isinstance(InMemoryEventSink(), EventQueries)

    def test_write_stamps_created_at(self) -> None:
        clock = FakeClock()
        sink = InMemoryEventSink(clock)
        asyncio.run(sink.write((_event(), _event())))
        assert [e.created_at for e in sink.all()] == [clock.now(), clock.now()]

    def test_recent_orders_newest_first_with_paging(self) -> None:
        sink = InMemoryEventSink(FakeClock())
        old, mid, new = _event(minutes_ago=30), _event(minutes_ago=10), _event()
        asyncio.run(sink.write((old, new, mid)))
        recent = asyncio.run(sink.recent(limit=2))
        assert [e.event_id for e in recent] == [new.event_id, mid.event_id]
        page2 = asyncio.run(sink.recent(limit=2, offset=2))
        assert [e.event_id for e in page2] == [old.event_id]

    def test_stats_since(self) -> None:
        sink = InMemoryEventSink(FakeClock())
        batch = (
            _event("low", user_id="alice"),
            _event("medium", user_id="alice"),
            _event("high", user_id="bob"),
            _event("critical"),
            _event("critical", minutes_ago=120, user_id="carol"),
        )
        asyncio.run(sink.write(batch))
        since = FakeClock().now() - timedelta(hours=1)
        stats = asyncio.run(sink.stats_since(since))
        assert stats == EventStats(total_events=4, warnings=1, errors=2, unique_users=2)

    def test_stats_between_upper_bound_is_exclusive(self) -> None:
        sink = InMemoryEventSink(FakeClock())
        now = FakeClock().now()
        asyncio.run(sink.write((_event(minutes_ago=90), _event(minutes_ago=60), _event(minutes_ago=30))))
        stats = asyncio.run(sink.stats_between(now - timedelta(minutes=90), now - timedelta(minutes=60)))
        assert stats.total_events == 1

    def test_daily_severity_counts(self) -> None:
        sink = InMemoryEventSink(FakeClock())
        batch = (
            _event("low"),
            _event("low", minutes_ago=30),
            _event("critical", minutes_ago=60),
            _event("high", minutes_ago=60 * 24),
            _event("medium", minutes_ago=60 * 24 * 10),
        )
        asyncio.run(sink.write(batch))
        since = FakeClock().now() - timedelta(days=7)
        counts = asyncio.run(sink.daily_severity_counts(since))
        assert counts == [
            DailySeverityCounts(day=date(2025, 12, 31), high=1),
            DailySeverityCounts(day=date(2026, 1, 1), low=2, critical=1),
        ]
        assert counts[1].to_dict() == {"date": "2026-01-01", "low": 2, "medium": 0, "high": 0, "critical": 1}

    def test_ping_is_healthy(self) -> None:
        asyncio.run(InMemoryEventSink().ping())


class TestRecordingSink:
    def test_records_batches(self) -> None:
        sink = RecordingSink()
        a, b = _event(), _event()
        asyncio.run(sink.write([a, b]))
        assert sink.batch_sizes == [2]
        assert sink.events == [a, b]

    def test_programmed_failure(self) -> None:
        sink = RecordingSink(fail_times=1)
        with pytest.raises(SinkError):
            asyncio.run(sink.write([_event()]))
        asyncio.run(sink.write([_event()]))
        assert sink.attempts == 2
        assert sink.batch_sizes == [1]

    def test_unhealthy_ping(self) -> None:
        sink = RecordingSink()
        sink.healthy = False
        with pytest.raises(HealthCheckError):
            asyncio.run(sink.ping())

    def test_wait_for_writes_times_out(self) -> None:
        with pytest.raises(TimeoutError):
            asyncio.run(RecordingSink().wait_for_writes(1, timeout=0.01))
