"""Observability module.

Provides structured logging, metrics, and health checks.
"""

from .context import (
    bind_invoice,
    generate_request_id,
    get_invoice_id,
    get_request_id,
    request_id_var,
    set_request_id,
)
from .health import ComponentHealth, HealthStatus
from .logging_config import configure_logging
from .metrics import record_invoice_processed
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    # Metrics
    "record_invoice_processed",
    # Context
    "bind_invoice",
    "generate_request_id",
    "get_invoice_id",
    "get_request_id",
    "request_id_var",
    "set_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
