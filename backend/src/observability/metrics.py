"""Prometheus metrics for the invoice memory service.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

from domain.memory.models import EngineOutput

# Invoice processing metrics
invoices_processed_total = Counter(
    "invoice_memory_invoices_processed_total",
    "Total number of invoices run through the correction pipeline",
    ["vendor", "outcome"]  # outcome: auto_approved|needs_review
)

invoice_processing_duration_seconds = Histogram(
    "invoice_memory_processing_duration_seconds",
    "Time spent processing one invoice in seconds",
    ["vendor"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

invoice_confidence_histogram = Histogram(
    "invoice_memory_confidence",
    "Final confidence score distribution",
    buckets=[0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
)

# Rule and learning metrics
corrections_proposed_total = Counter(
    "invoice_memory_corrections_proposed_total",
    "Total corrections proposed by rule application",
    ["vendor"]
)

memory_updates_total = Counter(
    "invoice_memory_memory_updates_total",
    "Total correction memory creations and updates",
    ["vendor"]
)

audit_persistence_failures_total = Counter(
    "invoice_memory_audit_persistence_failures_total",
    "Audit trails that could not be written to the audit sink"
)

# HTTP metrics
http_request_duration_seconds = Histogram(
    "invoice_memory_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "status_code"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)


def record_invoice_processed(output: EngineOutput, duration_seconds: float) -> None:
    """Update all pipeline metrics for one processed invoice.

    Args:
        output: Pipeline result
        duration_seconds: Wall-clock processing time
    """
    outcome = "needs_review" if output.requires_human_review else "auto_approved"
    invoices_processed_total.labels(vendor=output.vendor, outcome=outcome).inc()
    invoice_processing_duration_seconds.labels(vendor=output.vendor).observe(duration_seconds)
    invoice_confidence_histogram.observe(output.confidence_score)

    if output.proposed_corrections:
        corrections_proposed_total.labels(vendor=output.vendor).inc(len(output.proposed_corrections))
    if output.memory_updates:
        memory_updates_total.labels(vendor=output.vendor).inc(len(output.memory_updates))
    if not output.audit_persisted:
        audit_persistence_failures_total.inc()
