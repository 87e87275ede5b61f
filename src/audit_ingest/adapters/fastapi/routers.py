"""FastAPI adapter – ingest, health and event-query routers."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from audit_ingest.adapters.fastapi.deps import (
    get_clock,
    get_dispatcher,
    get_event_queries,
    get_health_registry,
)
from audit_ingest.adapters.fastapi.schemas import parse_event_payload
from audit_ingest.application.dispatch import BufferedDispatcher
from audit_ingest.application.queries import MAX_PAGE_SIZE, EventQueries
from audit_ingest.kernel.time import Clock
from audit_ingest.observability.health import HealthRegistry
from audit_ingest.observability.logging import get_logger

logger = get_logger(__name__)

ACCEPTED_BODY = "Event queued for ingestion"
MAX_STATS_WINDOW_HOURS = 24 * 365
MAX_TIMESERIES_DAYS = 365


def FastAPIIngestRouter() -> APIRouter:
    """``POST /ingest`` – validate, build the event and hand it to the dispatcher.

    Any other method on ``/ingest`` gets FastAPI's 405.
    """
    router = APIRouter(tags=["ingest"])

    @router.post("/ingest", status_code=202, response_class=PlainTextResponse)
    async def ingest(
        request: Request,
        dispatcher: BufferedDispatcher = Depends(get_dispatcher),
        clock: Clock = Depends(get_clock),
    ) -> PlainTextResponse:
        payload = parse_event_payload(await request.body())
        event = payload.to_event(clock)
        result = dispatcher.submit(event)
        if result.is_err():
            logger.warning("ingest.rejected", reason=result.error.code, event_id=str(event.event_id))
            raise result.error
        return PlainTextResponse(ACCEPTED_BODY, status_code=202)

    return router


def FastAPIHealthRouter(path: str = "/health") -> APIRouter:
    """Sink reachability plus queue fill level; 503 when any check fails."""
    router = APIRouter(tags=["ops"])

    @router.get(path)
    async def health(
        dispatcher: BufferedDispatcher = Depends(get_dispatcher),
        registry: HealthRegistry = Depends(get_health_registry),
    ) -> JSONResponse:
        report = await registry.run_all()
        body = {
            "status": "healthy" if report.overall else "unhealthy",
            "buffer_usage": f"{dispatcher.usage():.1f}%",
            "buffer_size": dispatcher.qsize(),
            "buffer_cap": dispatcher.capacity,
        }
        return JSONResponse(status_code=200 if report.overall else 503, content=body)

    return router


def FastAPIEventsRouter() -> APIRouter:
    """Read side: recent events, windowed counters and a per-day severity series."""
    router = APIRouter(tags=["events"])

    @router.get("/events")
    async def list_events(
        limit: int = Query(default=100, ge=1, le=MAX_PAGE_SIZE),
        offset: int = Query(default=0, ge=0),
        queries: EventQueries = Depends(get_event_queries),
    ) -> list[dict[str, Any]]:
        events = await queries.recent(limit=limit, offset=offset)
        return [event.to_dict() for event in events]

    @router.get("/events/stats")
    async def event_stats(
        hours: int = Query(default=24, ge=1, le=MAX_STATS_WINDOW_HOURS),
        queries: EventQueries = Depends(get_event_queries),
        clock: Clock = Depends(get_clock),
    ) -> dict[str, Any]:
        window = timedelta(hours=hours)
        since = clock.now() - window
        comparison = await queries.compare_windows(since, window)
        return {"window_hours": hours, "since": since.isoformat(), **comparison.to_dict()}

    @router.get("/events/timeseries")
    async def event_timeseries(
        days: int = Query(default=90, ge=1, le=MAX_TIMESERIES_DAYS),
        queries: EventQueries = Depends(get_event_queries),
        clock: Clock = Depends(get_clock),
    ) -> list[dict[str, Any]]:
        since = clock.now() - timedelta(days=days)
        counts = await queries.daily_severity_counts(since)
        return [day.to_dict() for day in counts]

    return router


__all__ = ["ACCEPTED_BODY", "FastAPIEventsRouter", "FastAPIHealthRouter", "FastAPIIngestRouter"]
