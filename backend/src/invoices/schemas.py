"""Pydantic schemas for invoice processing endpoints.

Responses are serialized in camelCase, matching the stored document format.
"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuditEntrySchema(CamelModel):
    """One audit trail entry."""
    step: str
    timestamp: datetime
    details: str


class ProcessInvoiceResponse(CamelModel):
    """Result of running an invoice through the correction pipeline."""
    invoice_id: str
    vendor: str
    normalized_invoice: Dict[str, Any]
    proposed_corrections: List[str]
    requires_human_review: bool
    reasoning: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    memory_updates: List[str]
    audit_trail: List[AuditEntrySchema]
    audit_persisted: bool


class AuditTrailResponse(CamelModel):
    """Persisted audit trail of an invoice (all runs, oldest first)."""
    invoice_id: str
    entries: List[AuditEntrySchema]
