"""Observability – structured logging helpers."""
from audit_ingest.observability.logging.factory import JsonLoggerFactory
from audit_ingest.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
