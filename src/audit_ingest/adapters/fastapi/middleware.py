"""FastAPI adapter – correlation-ID ASGI middleware."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


class FastAPICorrelationIdMiddleware:
    """Resolve a correlation ID per request and bind it into structlog contextvars.

    Header resolution order:
    1. ``X-Correlation-ID``
    2. ``X-Request-ID``
    3. Generated UUID v4

    The resolved ID is echoed back in the ``X-Correlation-ID`` response header.
    """

    def __init__(
        self,
        app: "ASGIApp",
        header_name: str = "X-Correlation-ID",
        fallback_headers: tuple[str, ...] = ("X-Request-ID",),
    ) -> None:
        self.app = app
        self._response_header = header_name.lower().encode()
        self._request_headers: list[bytes] = [
            header_name.lower().encode(),
            *[h.lower().encode() for h in fallback_headers],
        ]

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        correlation_id = ""
        for header in self._request_headers:
            correlation_id = headers.get(header, b"").decode("latin-1").strip()
            if correlation_id:
                break
        correlation_id = correlation_id or str(uuid4())

        response_header = self._response_header
        encoded_id = correlation_id.encode("latin-1")

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers_list: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers_list.append((response_header, encoded_id))
                message = {**message, "headers": headers_list}
            await send(message)

        with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
            await self.app(scope, receive, send_with_header)


__all__ = ["FastAPICorrelationIdMiddleware"]
