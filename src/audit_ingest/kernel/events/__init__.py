"""Kernel events – the ingested audit record."""
from audit_ingest.kernel.events.event import (
    ENDPOINT_MAX_LENGTH,
    HTTP_METHOD_MAX_LENGTH,
    USER_ID_MAX_LENGTH,
    Event,
    EventType,
    Severity,
    normalize_ip,
)

__all__ = [
    "ENDPOINT_MAX_LENGTH",
    "Event",
    "EventType",
    "HTTP_METHOD_MAX_LENGTH",
    "Severity",
    "USER_ID_MAX_LENGTH",
    "normalize_ip",
]
