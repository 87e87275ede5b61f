"""Unit tests for the Result type."""

from __future__ import annotations

import pytest

from audit_ingest.kernel.errors import BufferFullError
from audit_ingest.kernel.types import Err, Ok


class TestOk:
    def test_value_and_flags(self) -> None:
        r = Ok(42)
        assert r.value == 42
        assert r.is_ok()
        assert not r.is_err()
        assert r.unwrap() == 42

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"


class TestErr:
    def test_error_and_flags(self) -> None:
        exc = BufferFullError()
        r = Err(exc)
        assert r.error is exc
        assert r.is_err()
        assert not r.is_ok()

    def test_unwrap_raises_carried_error(self) -> None:
        with pytest.raises(BufferFullError):
            Err(BufferFullError()).unwrap()
