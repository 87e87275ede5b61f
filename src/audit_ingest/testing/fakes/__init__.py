"""Testing fakes – in-memory doubles for sinks and clocks."""
from audit_ingest.testing.fakes.clock import FakeClock
from audit_ingest.testing.fakes.sink import RecordingSink

__all__ = ["FakeClock", "RecordingSink"]
