"""FastAPI adapter – dependencies resolving app-owned collaborators.

Everything lives on ``app.state`` (set by :func:`create_app`), so each app
instance carries its own dispatcher and sink.
"""
from __future__ import annotations

from fastapi import HTTPException, Request

from audit_ingest.application.dispatch import BufferedDispatcher
from audit_ingest.application.queries import EventQueries
from audit_ingest.kernel.time import Clock
from audit_ingest.observability.health import HealthRegistry


def get_dispatcher(request: Request) -> BufferedDispatcher:
    return request.app.state.dispatcher


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_health_registry(request: Request) -> HealthRegistry:
    return request.app.state.health


def get_event_queries(request: Request) -> EventQueries:
    sink = request.app.state.sink
    if not isinstance(sink, EventQueries):
        raise HTTPException(status_code=501, detail="Event queries are not supported by the configured sink")
    return sink


__all__ = ["get_clock", "get_dispatcher", "get_event_queries", "get_health_registry"]
