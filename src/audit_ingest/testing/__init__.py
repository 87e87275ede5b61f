"""Testing support – fakes for exercising the dispatcher and HTTP layer."""
from audit_ingest.testing.fakes import FakeClock, RecordingSink

__all__ = ["FakeClock", "RecordingSink"]
