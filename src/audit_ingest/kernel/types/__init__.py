"""Kernel types."""
from audit_ingest.kernel.types.result import Err, Ok, Result

__all__ = ["Err", "Ok", "Result"]
