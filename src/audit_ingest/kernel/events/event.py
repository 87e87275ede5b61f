"""Kernel events – Event value object, EventType, Severity."""

from __future__ import annotations

import dataclasses
import ipaddress
import uuid
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from audit_ingest.kernel.errors.domain import ValidationError
from audit_ingest.kernel.time import Clock, SystemClock


class EventType(str, Enum):
    AUTH_ATTEMPT = "auth_attempt"
    API_CALL = "api_call"
    ADMIN_ACTION = "admin_action"
    DATA_ACCESS = "data_access"
    CONFIG_CHANGE = "config_change"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Column widths of the events table.
USER_ID_MAX_LENGTH = 100
ENDPOINT_MAX_LENGTH = 255
HTTP_METHOD_MAX_LENGTH = 10


def normalize_ip(value: str) -> str:
    """Return the canonical text form of an IPv4/IPv6 address.

    Raises :class:`ValidationError` when *value* does not parse or carries an
    IPv6 zone (``fe80::1%eth0``), which ``INET`` cannot store.
    """
    try:
        address = ipaddress.ip_address(value.strip())
    except (ValueError, AttributeError) as exc:
        raise ValidationError(
            "invalid ip_address",
            errors=[{"field": "ip_address", "reason": "invalid"}],
            cause=exc,
        ) from exc
    if getattr(address, "scope_id", None) is not None:
        raise ValidationError(
            "invalid ip_address",
            errors=[{"field": "ip_address", "reason": "scoped"}],
        )
    return str(address)


@dataclasses.dataclass(frozen=True)
class Event:
    """An immutable security/audit record.

    Parameters
    ----------
    event_type:
        Category of the event.
    severity:
        Severity level.
    ip_address:
        Originating network address; normalised on construction.
    occurred_at:
        When the event happened (timezone-aware).
    event_id:
        Unique identifier; generated when omitted.
    ingested_at:
        Set by the dispatcher when the event is accepted.
    created_at:
        Set by the sink when the row is written; usually ``None`` in memory.
    """

    event_type: EventType
    severity: Severity
    ip_address: str
    occurred_at: datetime
    event_id: uuid.UUID = dataclasses.field(default_factory=uuid.uuid4)
    user_id: str | None = None
    user_agent: str | None = None
    endpoint: str | None = None
    http_method: str | None = None
    status_code: int | None = None
    metadata: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    ingested_at: datetime | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "event_type", EventType(self.event_type))
        except ValueError as exc:
            raise ValidationError(
                "invalid event_type",
                errors=[{"field": "event_type", "reason": "unknown"}],
            ) from exc
        try:
            object.__setattr__(self, "severity", Severity(self.severity))
        except ValueError as exc:
            raise ValidationError(
                "invalid severity",
                errors=[{"field": "severity", "reason": "unknown"}],
            ) from exc
        object.__setattr__(self, "ip_address", normalize_ip(self.ip_address))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def create(
        cls,
        *,
        event_type: EventType | str,
        severity: Severity | str,
        ip_address: str,
        event_id: uuid.UUID | None = None,
        occurred_at: datetime | None = None,
        clock: Clock | None = None,
        **optional: Any,
    ) -> "Event":
        """Build an event, filling the identifier and occurred time when absent.

        The nil UUID counts as absent.
        """
        clock = clock or SystemClock()
        return cls(
            event_type=event_type,  # type: ignore[arg-type]
            severity=severity,  # type: ignore[arg-type]
            ip_address=ip_address,
            occurred_at=occurred_at or clock.now(),
            event_id=event_id if event_id is not None and event_id.int != 0 else uuid.uuid4(),
            **optional,
        )

    def with_ingested_at(self, when: datetime) -> "Event":
        return dataclasses.replace(self, ingested_at=when)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation using the wire field names."""
        return {
            "id": str(self.event_id),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "endpoint": self.endpoint,
            "http_method": self.http_method,
            "status_code": self.status_code,
            "metadata": dict(self.metadata),
            "occurred_at": self.occurred_at.isoformat(),
            "ingested_at": self.ingested_at.isoformat() if self.ingested_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


__all__ = [
    "ENDPOINT_MAX_LENGTH",
    "Event",
    "EventType",
    "HTTP_METHOD_MAX_LENGTH",
    "Severity",
    "USER_ID_MAX_LENGTH",
    "normalize_ip",
]
