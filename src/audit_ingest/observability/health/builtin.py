from __future__ import annotations

from typing import TYPE_CHECKING

from audit_ingest.kernel.errors import HealthCheckError
from audit_ingest.observability.health.check import HealthCheck, HealthStatus

if TYPE_CHECKING:
    from audit_ingest.application.dispatch.sink import EventSink

__all__ = ["SinkHealthCheck"]


class SinkHealthCheck(HealthCheck):
    """Checks event-store reachability through :meth:`EventSink.ping`."""

    def __init__(self, sink: "EventSink", name_: str = "sink") -> None:
        self._sink = sink
        self._name = name_

    @property
    def name(self) -> str:
        return self._name

    async def check(self) -> HealthStatus:
        try:
            await self._sink.ping()
        except HealthCheckError as exc:
            return HealthStatus(healthy=False, detail=exc.message)
        return HealthStatus(healthy=True)
