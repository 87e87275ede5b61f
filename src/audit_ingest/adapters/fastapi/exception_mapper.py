"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response

from audit_ingest.kernel.errors import (
    BaseError,
    DispatchRejectedError,
    DomainError,
    InfrastructureError,
    ValidationError,
)

RETRY_AFTER_SECONDS = 1


class FastAPIExceptionMapper:
    """Register error → HTTP status-code mappings on a FastAPI app.

    Bodies are plain text carrying the error ``message``, e.g.
    ``Buffer full, try again later``.

    Mappings
    --------
    ``ValidationError``        → 400
    ``DispatchRejectedError``  → 503 (with ``Retry-After``)
    ``InfrastructureError``    → 503
    ``DomainError``            → 422
    ``RequestValidationError`` → 400 (query/path parameters)
    """

    def __init__(self) -> None:
        # ORDER MATTERS: more-specific subtypes first
        self._map: list[tuple[type[BaseError], int]] = [
            (ValidationError, 400),
            (DispatchRejectedError, 503),
            (InfrastructureError, 503),
            (DomainError, 422),
        ]

    def register(self, app: FastAPI) -> None:
        """Register all error handlers on a ``FastAPI`` app."""
        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, self._make_handler(status))
        app.add_exception_handler(RequestValidationError, self._request_validation_handler)

    @staticmethod
    def _make_handler(code: int) -> Callable[[Request, Any], Any]:
        async def handler(request: Request, exc: BaseError) -> Response:  # noqa: ARG001
            headers: dict[str, str] = {}
            if isinstance(exc, DispatchRejectedError):
                headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
            return PlainTextResponse(exc.message, status_code=code, headers=headers)

        return handler

    @staticmethod
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> Response:  # noqa: ARG004
        errors = exc.errors()
        loc = errors[0].get("loc", ()) if errors else ()
        name = str(loc[-1]) if loc else "request"
        return PlainTextResponse(f"invalid {name}", status_code=400)


__all__ = ["FastAPIExceptionMapper"]
