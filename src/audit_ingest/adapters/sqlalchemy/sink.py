"""SQLAlchemy adapter – SQLAlchemyEventSink."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import Table, and_, case, func, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from audit_ingest.adapters.sqlalchemy.schema import build_events_table
from audit_ingest.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from audit_ingest.application.dispatch.sink import EventSink
from audit_ingest.application.queries import MAX_PAGE_SIZE, DailySeverityCounts, EventQueries, EventStats
from audit_ingest.kernel.errors import HealthCheckError, SinkError
from audit_ingest.kernel.events import Event, Severity
from audit_ingest.kernel.time import Clock, SystemClock


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SQLAlchemyEventSink(EventSink, EventQueries):
    """SQLAlchemy 2.x Core-based event store.

    Each :meth:`write` runs one transaction with an executemany ``INSERT``,
    so a batch is committed whole or not at all.  ``created_at`` is stamped
    at write time; ``ingested_at`` falls back to the same instant for events
    that never went through the dispatcher.
    """

    def __init__(
        self,
        session_factory: SqlAlchemySessionFactory,
        table: Table | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._table = table if table is not None else build_events_table()
        self._clock = clock or SystemClock()

    @property
    def table(self) -> Table:
        return self._table

    # ------------------------------------------------------------------
    # Schema helpers
    # ------------------------------------------------------------------

    async def create_schema(self, bind: AsyncEngine | None = None) -> None:
        """Create the events table and its indexes if they do not exist."""
        engine = bind if bind is not None else self._session_factory.engine
        async with engine.begin() as conn:
            await conn.run_sync(self._table.metadata.create_all)

    # ------------------------------------------------------------------
    # EventSink interface
    # ------------------------------------------------------------------

    async def write(self, batch: Sequence[Event]) -> None:
        if not batch:
            return
        now = self._clock.now()
        rows = [self._to_row(event, now) for event in batch]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(insert(self._table), rows)
        except (SQLAlchemyError, OSError) as exc:
            raise SinkError(
                f"Failed to insert batch of {len(rows)} events",
                batch_size=len(rows),
                cause=exc,
            ) from exc

    async def ping(self) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            raise HealthCheckError("database", "Database unhealthy", cause=exc) from exc

    async def close(self) -> None:
        await self._session_factory.dispose()

    # ------------------------------------------------------------------
    # EventQueries interface
    # ------------------------------------------------------------------

    async def recent(self, *, limit: int = 100, offset: int = 0) -> list[Event]:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        stmt = (
            select(self._table)
            .order_by(self._table.c.occurred_at.desc())
            .limit(limit)
            .offset(max(0, offset))
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.mappings().all()
        return [self._from_row(row) for row in rows]

    async def stats_between(self, start: datetime, end: datetime | None = None) -> EventStats:
        c = self._table.c
        window = c.occurred_at >= start if end is None else and_(c.occurred_at >= start, c.occurred_at < end)
        stmt = select(
            func.count().label("total_events"),
            func.coalesce(func.sum(case((c.severity == Severity.MEDIUM.value, 1), else_=0)), 0).label("warnings"),
            func.coalesce(
                func.sum(case((c.severity.in_([Severity.HIGH.value, Severity.CRITICAL.value]), 1), else_=0)),
                0,
            ).label("errors"),
            func.count(func.distinct(c.user_id)).label("unique_users"),
        ).where(window)
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).mappings().one()
        return EventStats(
            total_events=int(row["total_events"]),
            warnings=int(row["warnings"]),
            errors=int(row["errors"]),
            unique_users=int(row["unique_users"]),
        )

    def _utc_day(self) -> Any:
        occurred_at = self._table.c.occurred_at
        if self._session_factory.engine.dialect.name == "postgresql":
            # date() of a timestamptz follows the session TimeZone
            occurred_at = func.timezone("UTC", occurred_at)
        return func.date(occurred_at)

    async def daily_severity_counts(self, since: datetime) -> list[DailySeverityCounts]:
        c = self._table.c
        day = self._utc_day().label("day")
        per_severity = [
            func.coalesce(func.sum(case((c.severity == severity.value, 1), else_=0)), 0).label(severity.value)
            for severity in Severity
        ]
        stmt = select(day, *per_severity).where(c.occurred_at >= since).group_by(day).order_by(day)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).mappings().all()
        return [
            DailySeverityCounts(
                # PostgreSQL returns a date, SQLite an ISO string
                day=row["day"] if isinstance(row["day"], date) else date.fromisoformat(row["day"]),
                **{severity.value: int(row[severity.value]) for severity in Severity},
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _to_row(event: Event, now: datetime) -> dict[str, Any]:
        return {
            "id": event.event_id,
            "event_type": event.event_type.value,
            "severity": event.severity.value,
            "user_id": event.user_id,
            "ip_address": event.ip_address,
            "user_agent": event.user_agent,
            "endpoint": event.endpoint,
            "http_method": event.http_method,
            "status_code": event.status_code,
            "metadata": dict(event.metadata) or None,
            "occurred_at": event.occurred_at,
            "ingested_at": event.ingested_at or now,
            "created_at": event.created_at or now,
        }

    @staticmethod
    def _from_row(row: Any) -> Event:
        return Event(
            event_id=row["id"],
            event_type=row["event_type"],
            severity=row["severity"],
            user_id=row["user_id"],
            ip_address=str(row["ip_address"]),
            user_agent=row["user_agent"],
            endpoint=row["endpoint"],
            http_method=row["http_method"],
            status_code=row["status_code"],
            metadata=row["metadata"] or {},
            occurred_at=_aware(row["occurred_at"]),
            ingested_at=_aware(row["ingested_at"]),
            created_at=_aware(row["created_at"]),
        )


__all__ = ["SQLAlchemyEventSink"]
