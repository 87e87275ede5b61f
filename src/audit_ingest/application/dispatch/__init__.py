"""Dispatch – buffered batching between event producers and the event store."""
from audit_ingest.application.dispatch.dispatcher import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CAPACITY,
    DEFAULT_FLUSH_INTERVAL,
    BufferedDispatcher,
    DispatcherStats,
)
from audit_ingest.application.dispatch.sink import EventSink, InMemoryEventSink

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CAPACITY",
    "DEFAULT_FLUSH_INTERVAL",
    "BufferedDispatcher",
    "DispatcherStats",
    "EventSink",
    "InMemoryEventSink",
]
