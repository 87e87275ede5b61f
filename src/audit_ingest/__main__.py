"""Run the ingestion service: ``python -m audit_ingest`` or ``audit-ingest``."""
from __future__ import annotations

import uvicorn

from audit_ingest import __version__
from audit_ingest.adapters.fastapi import create_app
from audit_ingest.config import DotenvSettingsLoader, IngestSettings
from audit_ingest.observability.logging import JsonLoggerFactory, get_logger


def main() -> None:
    settings = DotenvSettingsLoader().load(IngestSettings)
    JsonLoggerFactory.configure(settings.log_level, settings.log_format)
    logger = get_logger("audit_ingest")
    logger.info(
        "app.starting",
        version=__version__,
        host=settings.host,
        port=settings.port,
        buffer_size=settings.buffer_size,
        batch_size=settings.batch_size,
        flush_interval=settings.flush_interval,
        events_table=settings.events_table,
    )
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
