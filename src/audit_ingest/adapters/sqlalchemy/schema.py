"""SQLAlchemy adapter – events table definition.

Mirrors the dashboard's table: ``ip_address`` is ``INET`` and ``metadata``
is ``JSONB`` on PostgreSQL; elsewhere both fall back to string columns, with
metadata serialized to JSON text by the ``JSON`` type.
"""
from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Index, Integer, MetaData, String, Table, Text, Uuid
from sqlalchemy.dialects.postgresql import INET, JSONB

from audit_ingest.config.settings.ingest import DEFAULT_EVENTS_TABLE
from audit_ingest.kernel.events import ENDPOINT_MAX_LENGTH, HTTP_METHOD_MAX_LENGTH, USER_ID_MAX_LENGTH


def build_events_table(name: str = DEFAULT_EVENTS_TABLE, metadata: MetaData | None = None) -> Table:
    """Return the events :class:`Table` bound to a (new) :class:`MetaData`."""
    meta = metadata if metadata is not None else MetaData()
    table = Table(
        name,
        meta,
        Column("id", Uuid, primary_key=True),
        Column("event_type", String(50), nullable=False),
        Column("severity", String(20), nullable=False),
        Column("user_id", String(USER_ID_MAX_LENGTH), nullable=True),
        Column("ip_address", String(45).with_variant(INET(), "postgresql"), nullable=False),
        Column("user_agent", Text, nullable=True),
        Column("endpoint", String(ENDPOINT_MAX_LENGTH), nullable=True),
        Column("http_method", String(HTTP_METHOD_MAX_LENGTH), nullable=True),
        Column("status_code", Integer, nullable=True),
        Column("metadata", JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql"), nullable=True),
        Column("occurred_at", DateTime(timezone=True), nullable=False),
        Column("ingested_at", DateTime(timezone=True), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
    )
    Index("idx_events_occurred_at", table.c.occurred_at.desc())
    Index("idx_events_severity", table.c.severity)
    Index("idx_events_type", table.c.event_type)
    Index("idx_events_ip", table.c.ip_address)
    Index("idx_events_user", table.c.user_id)
    return table


__all__ = ["build_events_table"]
