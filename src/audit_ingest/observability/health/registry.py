from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from audit_ingest.observability.health.check import DEFAULT_CHECK_TIMEOUT, HealthCheck, HealthStatus
from audit_ingest.observability.logging import get_logger

__all__ = ["HealthReport", "HealthRegistry"]

logger = get_logger(__name__)


@dataclass
class HealthReport:
    results: dict[str, HealthStatus] = field(default_factory=dict)

    @property
    def overall(self) -> bool:
        return all(s.healthy for s in self.results.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.overall,
            "checks": {
                name: {
                    "healthy": s.healthy,
                    "detail": s.detail,
                    "latency_ms": round(s.latency_ms, 2),
                }
                for name, s in self.results.items()
            },
        }


class HealthRegistry:
    """Runs registered health checks and aggregates results."""

    def __init__(self, timeout: float = DEFAULT_CHECK_TIMEOUT) -> None:
        self._checks: list[HealthCheck] = []
        self._timeout = timeout

    def register(self, check: HealthCheck) -> None:
        self._checks.append(check)

    async def run_all(self) -> HealthReport:
        report = HealthReport()
        for check in self._checks:
            try:
                status = await check.timed_check(self._timeout)
            except Exception as exc:  # noqa: BLE001
                logger.exception("health.check_crashed", check=check.name)
                status = HealthStatus(healthy=False, detail=f"exception: {exc}")
            if not status.healthy:
                logger.warning("health.check_failed", check=check.name, detail=status.detail)
            report.results[check.name] = status
        return report
