"""Unit tests for structured logging

Tests cover:
- JSON formatter fields
- Request and invoice correlation through ContextFilter
- Extra fields passed with `extra=`
"""

import json
import sys
import logging

from observability.context import bind_invoice, request_id_var
from observability.logging_config import ContextFilter, JSONFormatter


def make_record(message="hello", **extra):
    record = logging.LogRecord(
        name="domain.memory.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def render(record):
    ContextFilter().filter(record)
    return json.loads(JSONFormatter().format(record))


class TestJSONFormatter:

    def test_basic_fields(self):
        data = render(make_record())

        assert data["level"] == "INFO"
        assert data["logger"] == "domain.memory.engine"
        assert data["message"] == "hello"
        assert data["request_id"] == "no-request-id"
        assert data["timestamp"].endswith("Z")
        assert "invoice_id" not in data

    def test_request_id_from_context(self):
        token = request_id_var.set("req-123")
        try:
            data = render(make_record())
        finally:
            request_id_var.reset(token)

        assert data["request_id"] == "req-123"

    def test_bound_invoice_id(self):
        with bind_invoice("INV-A-001"):
            data = render(make_record())

        assert data["invoice_id"] == "INV-A-001"

    def test_explicit_invoice_id_wins(self):
        with bind_invoice("INV-A-001"):
            data = render(make_record(invoice_id="INV-B-002"))

        assert data["invoice_id"] == "INV-B-002"

    def test_extra_fields(self):
        data = render(make_record(vendor="Parts AG", duration_ms=12))

        assert data["vendor"] == "Parts AG"
        assert data["duration_ms"] == 12

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = render(record)

        assert data["error"] == "boom"
        assert "ValueError" in data["traceback"]
