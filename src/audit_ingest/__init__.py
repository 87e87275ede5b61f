"""
audit_ingest – Buffered security-event ingestion service.

Import path convention::

    from audit_ingest.kernel.events import Event, EventType, Severity
    from audit_ingest.application.dispatch import BufferedDispatcher
    from audit_ingest.adapters.fastapi import create_app
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
