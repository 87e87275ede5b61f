"""Unit tests for the kernel error hierarchy."""

from __future__ import annotations

import json

from audit_ingest.kernel.errors import (
    ApplicationError,
    BaseError,
    BufferFullError,
    DispatchRejectedError,
    DispatcherClosedError,
    DomainError,
    HealthCheckError,
    InfrastructureError,
    SinkError,
    ValidationError,
)


class TestBaseError:
    def test_message_is_stored(self) -> None:
        err = BaseError("something went wrong")
        assert err.message == "something went wrong"

    def test_default_code(self) -> None:
        assert BaseError("m").code == "base_error"

    def test_custom_code(self) -> None:
        assert BaseError("m", code="custom").code == "custom"

    def test_to_dict_basic(self) -> None:
        err = BaseError("m", code="my_code", detail={"key": "val"})
        assert err.to_dict() == {"code": "my_code", "message": "m", "detail": {"key": "val"}}

    def test_cause_sets_dunder_cause(self) -> None:
        cause = RuntimeError("root")
        err = BaseError("wrap", cause=cause)
        assert err.__cause__ is cause
        assert "root" in err.to_dict()["cause"]

    def test_str_is_valid_json(self) -> None:
        parsed = json.loads(str(BaseError("oops", code="oops")))
        assert parsed["message"] == "oops"


class TestValidationError:
    def test_is_domain_error(self) -> None:
        assert isinstance(ValidationError("bad"), DomainError)

    def test_errors_in_to_dict(self) -> None:
        err = ValidationError("invalid ip_address", errors=[{"field": "ip_address", "reason": "invalid"}])
        assert err.to_dict()["errors"] == [{"field": "ip_address", "reason": "invalid"}]

    def test_errors_default_empty(self) -> None:
        assert ValidationError("x").errors == []


class TestDispatchRejectedErrors:
    def test_buffer_full_defaults(self) -> None:
        err = BufferFullError(capacity=3)
        assert err.message == "Buffer full, try again later"
        assert err.code == "buffer_full"
        assert err.capacity == 3

    def test_closed_defaults(self) -> None:
        err = DispatcherClosedError()
        assert err.message == "Service shutting down, try again later"
        assert err.code == "dispatcher_closed"

    def test_hierarchy(self) -> None:
        for err in (BufferFullError(), DispatcherClosedError()):
            assert isinstance(err, DispatchRejectedError)
            assert isinstance(err, ApplicationError)


class TestInfrastructureErrors:
    def test_sink_error_carries_batch_size(self) -> None:
        err = SinkError("insert failed", batch_size=7)
        assert err.batch_size == 7
        assert isinstance(err, InfrastructureError)

    def test_health_check_error_default_message(self) -> None:
        err = HealthCheckError("database")
        assert err.resource == "database"
        assert "database" in err.message

    def test_health_check_error_custom_message(self) -> None:
        assert HealthCheckError("database", "Database unhealthy").message == "Database unhealthy"
