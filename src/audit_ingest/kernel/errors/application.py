"""Application-layer errors – dispatcher admission failures."""

from __future__ import annotations

from typing import Any

from audit_ingest.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class DispatchRejectedError(ApplicationError):
    """The dispatcher refused an event; the caller may retry later."""

    default_code = "dispatch_rejected"


class BufferFullError(DispatchRejectedError):
    """The dispatcher queue is at capacity."""

    default_code = "buffer_full"

    def __init__(
        self,
        message: str = "Buffer full, try again later",
        *,
        capacity: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.capacity = capacity


class DispatcherClosedError(DispatchRejectedError):
    """Shutdown has begun; no further events are admitted."""

    default_code = "dispatcher_closed"

    def __init__(self, message: str = "Service shutting down, try again later", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


__all__ = [
    "ApplicationError",
    "BufferFullError",
    "DispatchRejectedError",
    "DispatcherClosedError",
]
