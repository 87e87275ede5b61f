"""SQLAlchemy adapter – session factory, events table, event sink."""
from audit_ingest.adapters.sqlalchemy.schema import build_events_table
from audit_ingest.adapters.sqlalchemy.session import SqlAlchemySessionFactory, normalize_database_url
from audit_ingest.adapters.sqlalchemy.sink import SQLAlchemyEventSink

__all__ = [
    "SQLAlchemyEventSink",
    "SqlAlchemySessionFactory",
    "build_events_table",
    "normalize_database_url",
]
