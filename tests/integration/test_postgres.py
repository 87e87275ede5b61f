"""Integration tests for the SQLAlchemy event store – Postgres.

Uses testcontainers to spawn a real PostgreSQL instance.
Run with: pytest tests/integration/test_postgres.py -m integration -v
"""
from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterator
from datetime import timedelta
from typing import Any

import pytest
from testcontainers.postgres import PostgresContainer

from audit_ingest.adapters.sqlalchemy import SQLAlchemyEventSink, SqlAlchemySessionFactory
from audit_ingest.application.dispatch import BufferedDispatcher
from audit_ingest.kernel.errors import SinkError
from audit_ingest.kernel.events import Event
from audit_ingest.testing.fakes import FakeClock


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def _run(coro):  # type: ignore[no-untyped-def]
    return asyncio.run(coro)


def _pg_url(container: Any) -> str:
    """Return an asyncpg-compatible URL from a PostgresContainer."""
    raw = container.get_connection_url()
    # testcontainers returns a psycopg2 URL; swap driver for asyncpg
    return raw.replace("psycopg2", "asyncpg", 1)


def _event(severity: str = "low", *, minutes_ago: int = 0, **optional: Any) -> Event:
    return Event.create(
        event_type="config_change",
        severity=severity,
        ip_address="192.0.2.10",
        occurred_at=FakeClock().now() - timedelta(minutes=minutes_ago),
        **optional,
    )


@pytest.fixture(scope="module")
def pg_url() -> Iterator[str]:
    with PostgresContainer("postgres:16-alpine") as container:
        yield _pg_url(container)


async def _fresh_sink(url: str) -> SQLAlchemyEventSink:
    sink = SQLAlchemyEventSink(SqlAlchemySessionFactory(url), clock=FakeClock())
    await sink.create_schema()
    async with sink._session_factory() as session:  # noqa: SLF001
        async with session.begin():
            await session.execute(sink.table.delete())
    return sink


# ---------------------------------------------------------------------------
# SQLAlchemyEventSink against PostgreSQL (INET + JSONB columns)
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestSQLAlchemyEventSinkPostgres:
    def test_round_trip(self, pg_url: str) -> None:
        async def run() -> None:
            sink = await _fresh_sink(pg_url)
            event = _event("high", user_id="ops", metadata={"key": "max_connections", "old": 100, "new": 200})
            await sink.write([event])
            [stored] = await sink.recent()
            assert stored.event_id == event.event_id
            assert stored.ip_address == "192.0.2.10"
            assert dict(stored.metadata) == {"key": "max_connections", "old": 100, "new": 200}
            assert stored.occurred_at == event.occurred_at
            await sink.close()

        _run(run())

    def test_duplicate_id_rolls_back_whole_batch(self, pg_url: str) -> None:
        async def run() -> None:
            sink = await _fresh_sink(pg_url)
            dup = uuid.uuid4()
            with pytest.raises(SinkError):
                await sink.write([_event(event_id=dup), _event(), _event(event_id=dup)])
            assert await sink.recent() == []
            await sink.close()

        _run(run())

    def test_stats_since(self, pg_url: str) -> None:
        async def run() -> None:
            sink = await _fresh_sink(pg_url)
            await sink.write(
                [
                    _event("medium", user_id="a"),
                    _event("critical", user_id="b"),
                    _event("low", minutes_ago=600, user_id="c"),
                ]
            )
            stats = await sink.stats_since(FakeClock().now() - timedelta(hours=1))
            assert (stats.total_events, stats.warnings, stats.errors, stats.unique_users) == (2, 1, 1, 2)
            await sink.close()

        _run(run())

    def test_daily_severity_counts(self, pg_url: str) -> None:
        async def run() -> None:
            sink = await _fresh_sink(pg_url)
            await sink.write(
                [
                    _event("high"),
                    _event("high", minutes_ago=5),
                    _event("low", minutes_ago=60 * 24),
                ]
            )
            counts = await sink.daily_severity_counts(FakeClock().now() - timedelta(days=3))
            assert [(c.day.isoformat(), c.low, c.high) for c in counts] == [
                ("2025-12-31", 1, 0),
                ("2026-01-01", 0, 2),
            ]
            await sink.close()

        _run(run())

    def test_daily_severity_counts_ignore_session_timezone(self, pg_url: str) -> None:
        async def run() -> None:
            await (await _fresh_sink(pg_url)).close()
            # UTC+13 moves 12:00 UTC on 2026-01-01 to the next local day
            factory = SqlAlchemySessionFactory(
                pg_url, connect_args={"server_settings": {"timezone": "Pacific/Auckland"}}
            )
            sink = SQLAlchemyEventSink(factory, clock=FakeClock())
            await sink.write([_event("critical")])
            counts = await sink.daily_severity_counts(FakeClock().now() - timedelta(days=1))
            assert [(c.day.isoformat(), c.critical) for c in counts] == [("2026-01-01", 1)]
            await sink.close()

        _run(run())

    def test_ping(self, pg_url: str) -> None:
        async def run() -> None:
            sink = SQLAlchemyEventSink(SqlAlchemySessionFactory(pg_url))
            await sink.ping()
            await sink.close()

        _run(run())


@pytest.mark.integration
class TestDispatcherPostgres:
    def test_dispatcher_batches_into_postgres(self, pg_url: str) -> None:
        async def run() -> None:
            sink = await _fresh_sink(pg_url)
            async with BufferedDispatcher(sink, batch_size=50, flush_interval=0.1) as dispatcher:
                for _ in range(120):
                    assert dispatcher.submit(_event()).is_ok()
            assert len(await sink.recent(limit=1000)) == 120
            assert dispatcher.stats().flushed == 120
            await sink.close()

        _run(run())
