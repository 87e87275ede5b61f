"""FastAPI adapter – application factory."""
from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from audit_ingest.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from audit_ingest.adapters.fastapi.middleware import FastAPICorrelationIdMiddleware
from audit_ingest.adapters.fastapi.routers import (
    FastAPIEventsRouter,
    FastAPIHealthRouter,
    FastAPIIngestRouter,
)
from audit_ingest.adapters.sqlalchemy import SQLAlchemyEventSink, SqlAlchemySessionFactory, build_events_table
from audit_ingest.application.dispatch import BufferedDispatcher, EventSink, InMemoryEventSink
from audit_ingest.config.settings import EnvSettingsLoader, IngestSettings
from audit_ingest.kernel.time import Clock, SystemClock
from audit_ingest.observability.health import HealthRegistry, SinkHealthCheck
from audit_ingest.observability.logging import get_logger

logger = get_logger(__name__)

MEMORY_URL_SCHEME = "memory://"


def build_sink(settings: IngestSettings, clock: Clock | None = None) -> EventSink:
    """Pick the event store from ``DATABASE_URL``.

    ``memory://`` selects the in-process store; anything else is handed to
    SQLAlchemy.
    """
    if settings.database_url.startswith(MEMORY_URL_SCHEME):
        return InMemoryEventSink(clock)
    session_factory = SqlAlchemySessionFactory(settings.database_url, pool_pre_ping=True)
    return SQLAlchemyEventSink(session_factory, table=build_events_table(settings.events_table), clock=clock)


def create_app(
    settings: IngestSettings | None = None,
    *,
    sink: EventSink | None = None,
    dispatcher: BufferedDispatcher | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Assemble the ingestion service.

    Without *settings* they are read from the environment, which makes the
    factory usable as ``uvicorn --factory audit_ingest.adapters.fastapi.app:create_app``.

    The dispatcher's consumer task starts with the app's lifespan and the
    final flush runs on its way out, bounded by ``shutdown_timeout``.
    """
    settings = settings or EnvSettingsLoader().load(IngestSettings)
    clock = clock or SystemClock()
    sink = sink if sink is not None else build_sink(settings, clock)
    if dispatcher is None:
        dispatcher = BufferedDispatcher(
            sink,
            capacity=settings.buffer_size,
            batch_size=settings.batch_size,
            flush_interval=settings.flush_interval,
            clock=clock,
        )
    health = HealthRegistry()
    health.register(SinkHealthCheck(sink, "database"))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.create_schema and isinstance(sink, SQLAlchemyEventSink):
            await sink.create_schema()
            logger.info("app.schema_ready", table=sink.table.name)
        await dispatcher.start()
        try:
            yield
        finally:
            await dispatcher.shutdown(timeout=settings.shutdown_timeout)
            await sink.close()

    app = FastAPI(title="audit-ingest", lifespan=lifespan)
    app.state.settings = settings
    app.state.clock = clock
    app.state.sink = sink
    app.state.dispatcher = dispatcher
    app.state.health = health

    app.add_middleware(FastAPICorrelationIdMiddleware)
    FastAPIExceptionMapper().register(app)
    app.include_router(FastAPIIngestRouter())
    app.include_router(FastAPIHealthRouter())
    app.include_router(FastAPIEventsRouter())
    return app


__all__ = ["MEMORY_URL_SCHEME", "build_sink", "create_app"]
