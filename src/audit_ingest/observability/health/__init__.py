"""Observability – Health Checks."""
from audit_ingest.observability.health.builtin import SinkHealthCheck
from audit_ingest.observability.health.check import HealthCheck, HealthStatus
from audit_ingest.observability.health.registry import HealthRegistry, HealthReport

__all__ = [
    "HealthCheck",
    "HealthRegistry",
    "HealthReport",
    "HealthStatus",
    "SinkHealthCheck",
]
