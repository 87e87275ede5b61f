"""FastAPI adapter – wire schema for ``POST /ingest``."""
from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from audit_ingest.kernel.errors import ValidationError
from audit_ingest.kernel.events import (
    ENDPOINT_MAX_LENGTH,
    HTTP_METHOD_MAX_LENGTH,
    USER_ID_MAX_LENGTH,
    Event,
    EventType,
    Severity,
    normalize_ip,
)
from audit_ingest.kernel.time import Clock

REQUIRED_FIELDS = ("event_type", "severity", "ip_address")
# Postgres INTEGER
MAX_STATUS_CODE = 2**31 - 1


class EventPayload(BaseModel):
    """JSON body accepted by the ingest endpoint.

    ``ingested_at``/``created_at`` are server-assigned, so unknown keys
    (including those) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: uuid.UUID | None = None
    event_type: EventType
    severity: Severity
    ip_address: str
    user_id: str | None = Field(default=None, max_length=USER_ID_MAX_LENGTH)
    user_agent: str | None = None
    endpoint: str | None = Field(default=None, max_length=ENDPOINT_MAX_LENGTH)
    http_method: str | None = Field(default=None, max_length=HTTP_METHOD_MAX_LENGTH)
    status_code: int | None = Field(default=None, ge=0, le=MAX_STATUS_CODE)
    metadata: dict[str, Any] | None = None
    occurred_at: datetime | None = None

    @field_validator("ip_address")
    @classmethod
    def _valid_ip(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ip_address is required")
        try:
            return normalize_ip(value)
        except ValidationError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("occurred_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_event(self, clock: Clock) -> Event:
        return Event.create(
            event_id=self.id,
            event_type=self.event_type,
            severity=self.severity,
            ip_address=self.ip_address,
            occurred_at=self.occurred_at,
            clock=clock,
            user_id=self.user_id,
            user_agent=self.user_agent,
            endpoint=self.endpoint,
            http_method=self.http_method,
            status_code=self.status_code,
            metadata=self.metadata or {},
        )


def _message_for(error: dict[str, Any]) -> str:
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else "body"
    if field in REQUIRED_FIELDS and (error.get("type") == "missing" or error.get("input") in ("", None)):
        return f"{field} is required"
    if field == "ip_address":
        return "invalid ip_address"
    return f"invalid {field}"


def parse_event_payload(body: bytes) -> EventPayload:
    """Decode and validate a request body.

    Raises :class:`ValidationError` whose message is the plain-text 400 body:
    ``Invalid JSON``, ``<field> is required``, ``invalid ip_address`` or
    ``invalid <field>``.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ValidationError("Invalid JSON", cause=exc) from exc
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON")
    try:
        return EventPayload.model_validate(data)
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise ValidationError(
            _message_for(errors[0]),
            errors=[
                {"field": ".".join(str(p) for p in e["loc"]), "reason": e["msg"]}
                for e in errors
            ],
        ) from exc


__all__ = ["EventPayload", "REQUIRED_FIELDS", "parse_event_payload"]
