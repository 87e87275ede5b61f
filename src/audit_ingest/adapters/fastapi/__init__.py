"""FastAPI adapter – app factory, routers, middleware, exception mapper."""
from audit_ingest.adapters.fastapi.app import build_sink, create_app
from audit_ingest.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from audit_ingest.adapters.fastapi.middleware import FastAPICorrelationIdMiddleware
from audit_ingest.adapters.fastapi.routers import (
    FastAPIEventsRouter,
    FastAPIHealthRouter,
    FastAPIIngestRouter,
)
from audit_ingest.adapters.fastapi.schemas import EventPayload, parse_event_payload

__all__ = [
    "EventPayload",
    "FastAPICorrelationIdMiddleware",
    "FastAPIEventsRouter",
    "FastAPIExceptionMapper",
    "FastAPIHealthRouter",
    "FastAPIIngestRouter",
    "build_sink",
    "create_app",
    "parse_event_payload",
]
