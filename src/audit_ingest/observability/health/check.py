from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

__all__ = ["DEFAULT_CHECK_TIMEOUT", "HealthCheck", "HealthStatus"]

DEFAULT_CHECK_TIMEOUT = 5.0


@dataclass
class HealthStatus:
    healthy: bool
    detail: str | None = None
    latency_ms: float = 0.0


class HealthCheck(ABC):
    """Base class for all health checks."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def check(self) -> HealthStatus: ...

    async def timed_check(self, timeout: float = DEFAULT_CHECK_TIMEOUT) -> HealthStatus:
        """Run :meth:`check` bounded by *timeout* seconds and record its latency."""
        start = time.monotonic()
        try:
            status = await asyncio.wait_for(self.check(), timeout=timeout)
        except asyncio.TimeoutError:
            status = HealthStatus(healthy=False, detail=f"timed out after {timeout:g}s")
        status.latency_ms = (time.monotonic() - start) * 1000
        return status
