"""Infrastructure errors – event store I/O failures."""

from __future__ import annotations

from typing import Any

from audit_ingest.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class SinkError(InfrastructureError):
    """A batch write to the event store failed; nothing from the batch was committed."""

    default_code = "sink_error"

    def __init__(
        self,
        message: str,
        *,
        batch_size: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.batch_size = batch_size


class HealthCheckError(InfrastructureError):
    """The event store could not be reached."""

    default_code = "health_check_failed"

    def __init__(self, resource: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"'{resource}' is unreachable", **kwargs)
        self.resource = resource


__all__ = ["HealthCheckError", "InfrastructureError", "SinkError"]
