"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError              (domain.py)
    │   └── ValidationError
    ├── ApplicationError         (application.py)
    │   └── DispatchRejectedError
    │       ├── BufferFullError
    │       └── DispatcherClosedError
    └── InfrastructureError      (infrastructure.py)
        ├── SinkError
        └── HealthCheckError
"""

from audit_ingest.kernel.errors.application import (
    ApplicationError,
    BufferFullError,
    DispatchRejectedError,
    DispatcherClosedError,
)
from audit_ingest.kernel.errors.base import BaseError
from audit_ingest.kernel.errors.domain import DomainError, ValidationError
from audit_ingest.kernel.errors.infrastructure import (
    HealthCheckError,
    InfrastructureError,
    SinkError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "BufferFullError",
    "DispatchRejectedError",
    "DispatcherClosedError",
    "DomainError",
    "HealthCheckError",
    "InfrastructureError",
    "SinkError",
    "ValidationError",
]
