"""Unit tests for the Event value object."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import UTC, datetime

import pytest

from audit_ingest.kernel.errors import ValidationError
from audit_ingest.kernel.events import Event, EventType, Severity, normalize_ip
from audit_ingest.testing.fakes import FakeClock


def _event(**overrides: object) -> Event:
    fields: dict[str, object] = {
        "event_type": "auth_attempt",
        "severity": "high",
        "ip_address": "10.0.0.1",
        "clock": FakeClock(),
    }
    fields.update(overrides)
    return Event.create(**fields)  # type: ignore[arg-type]


class TestNormalizeIp:
    def test_ipv4(self) -> None:
        assert normalize_ip(" 192.168.1.10 ") == "192.168.1.10"

    def test_ipv6_is_compressed(self) -> None:
        assert normalize_ip("2001:0db8:0000:0000:0000:0000:0000:0001") == "2001:db8::1"

    @pytest.mark.parametrize("scoped", ["fe80::1%eth0", "fe80::1%1"])
    def test_zoned_ipv6_rejected(self, scoped: str) -> None:
        with pytest.raises(ValidationError, match="invalid ip_address") as exc_info:
            normalize_ip(scoped)
        assert exc_info.value.errors[0]["reason"] == "scoped"

    @pytest.mark.parametrize("bad", ["", "not-an-ip", "300.1.1.1", "10.0.0.1/24"])
    def test_invalid_raises(self, bad: str) -> None:
        with pytest.raises(ValidationError, match="invalid ip_address"):
            normalize_ip(bad)


class TestEventConstruction:
    def test_create_fills_id_and_occurred_at(self) -> None:
        event = _event()
        assert isinstance(event.event_id, uuid.UUID)
        assert event.occurred_at == FakeClock().now()
        assert event.ingested_at is None
        assert event.created_at is None

    def test_strings_coerced_to_enums(self) -> None:
        event = _event(event_type="config_change", severity="critical")
        assert event.event_type is EventType.CONFIG_CHANGE
        assert event.severity is Severity.CRITICAL

    def test_explicit_id_kept(self) -> None:
        event_id = uuid.uuid4()
        assert _event(event_id=event_id).event_id == event_id

    def test_nil_id_replaced(self) -> None:
        nil = uuid.UUID(int=0)
        first, second = _event(event_id=nil), _event(event_id=nil)
        assert first.event_id != nil
        assert first.event_id != second.event_id

    def test_unknown_event_type(self) -> None:
        with pytest.raises(ValidationError, match="invalid event_type"):
            _event(event_type="login")

    def test_unknown_severity(self) -> None:
        with pytest.raises(ValidationError, match="invalid severity"):
            _event(severity="fatal")

    def test_invalid_ip(self) -> None:
        with pytest.raises(ValidationError, match="invalid ip_address"):
            _event(ip_address="999.0.0.1")

    def test_is_frozen(self) -> None:
        event = _event()
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.severity = Severity.LOW  # type: ignore[misc]

    def test_metadata_is_read_only_copy(self) -> None:
        source = {"attempt": 1}
        event = _event(metadata=source)
        source["attempt"] = 2
        assert event.metadata["attempt"] == 1
        with pytest.raises(TypeError):
            event.metadata["attempt"] = 3  # type: ignore[index]


class TestEventStamping:
    def test_with_ingested_at_returns_new_instance(self) -> None:
        event = _event()
        when = datetime(2026, 1, 1, 12, 0, 1, tzinfo=UTC)
        stamped = event.with_ingested_at(when)
        assert stamped is not event
        assert stamped.ingested_at == when
        assert event.ingested_at is None
        assert stamped.event_id == event.event_id


class TestEventToDict:
    def test_wire_names(self) -> None:
        event = _event(user_id="alice", status_code=401, metadata={"k": "v"})
        data = event.to_dict()
        assert data["id"] == str(event.event_id)
        assert data["event_type"] == "auth_attempt"
        assert data["severity"] == "high"
        assert data["user_id"] == "alice"
        assert data["status_code"] == 401
        assert data["metadata"] == {"k": "v"}
        assert data["occurred_at"] == "2026-01-01T12:00:00+00:00"
        assert data["ingested_at"] is None
