"""Log correlation context.

Request and invoice identifiers live in context variables so that every
log line emitted while serving a request or processing an invoice can be
correlated without threading ids through every call.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
invoice_id_var: ContextVar[Optional[str]] = ContextVar("invoice_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_invoice_id() -> Optional[str]:
    return invoice_id_var.get()


@contextmanager
def bind_invoice(invoice_id: str) -> Iterator[None]:
    """Attach an invoice id to all log records emitted inside the block.

    Usage:
        with bind_invoice("INV-A-001"):
            engine.process_invoice("INV-A-001")
    """
    token = invoice_id_var.set(invoice_id)
    try:
        yield
    finally:
        invoice_id_var.reset(token)
