"""Invoice memory domain models.

Two families of types live here:

- pydantic models for the invoice-side documents (invoices, purchase orders,
  human corrections). They are stored as JSON blobs in camelCase and are
  parsed through these models at the repository boundary.
- dataclasses for everything the correction pipeline produces internally
  (memories, audit entries, applied-memory records, engine output).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Invoice documents (pydantic)
# ============================================================================

class LineItem(BaseModel):
    """Single invoice line as delivered by extraction."""
    sku: Optional[str] = None
    description: Optional[str] = None
    qty: Optional[float] = None
    unit_price: Optional[float] = Field(None, alias="unitPrice")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("sku", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings as missing values"""
        if isinstance(v, str):
            return v.strip() or None
        return v


class InvoiceFields(BaseModel):
    """Extracted invoice field set.

    Monetary values are optional because extraction quality varies; rules
    check for presence before using them.
    """
    invoice_number: str = Field(..., alias="invoiceNumber")
    invoice_date: str = Field(..., alias="invoiceDate")
    service_date: Optional[str] = Field(None, alias="serviceDate")
    currency: Optional[str] = None
    po_number: Optional[str] = Field(None, alias="poNumber")
    net_total: Optional[float] = Field(None, alias="netTotal")
    tax_rate: Optional[float] = Field(None, alias="taxRate")
    tax_total: Optional[float] = Field(None, alias="taxTotal")
    gross_total: Optional[float] = Field(None, alias="grossTotal")
    line_items: List[LineItem] = Field(default_factory=list, alias="lineItems")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("service_date", "currency", "po_number", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class NormalizedInvoiceFields(InvoiceFields):
    """Working copy of the field set that rules are allowed to modify.

    Carries two annotations that only exist after rule application.
    """
    discount_terms: Optional[str] = Field(None, alias="discountTerms")
    duplicate: bool = False

    @classmethod
    def from_fields(cls, fields: InvoiceFields) -> "NormalizedInvoiceFields":
        """Create a deep, independent copy of an invoice's field set."""
        return cls.model_validate(fields.model_dump(by_alias=True))

    def to_document(self) -> dict[str, Any]:
        """Serialize in the camelCase document format."""
        return self.model_dump(by_alias=True, mode="json")


class Invoice(BaseModel):
    """Pre-extracted invoice as received by the pipeline."""
    invoice_id: str = Field(..., alias="invoiceId")
    vendor: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    raw_text: str = Field("", alias="rawText")
    fields: InvoiceFields

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PurchaseOrderLine(BaseModel):
    sku: Optional[str] = None
    qty: Optional[float] = None
    unit_price: Optional[float] = Field(None, alias="unitPrice")

    model_config = ConfigDict(populate_by_name=True)


class PurchaseOrder(BaseModel):
    """Purchase order used for PO-number suggestion. `date` is ISO formatted."""
    po_number: str = Field(..., alias="poNumber")
    vendor: str
    date: str
    line_items: List[PurchaseOrderLine] = Field(default_factory=list, alias="lineItems")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def skus(self) -> set[str]:
        return {line.sku for line in self.line_items if line.sku}


class FinalDecision(str, Enum):
    """Outcome of a human review"""
    APPROVED = "approved"
    REJECTED = "rejected"


class FieldCorrection(BaseModel):
    """One field-level change made by a reviewer."""
    field: str
    from_value: Any = Field(None, alias="from")
    to_value: Any = Field(None, alias="to")
    reason: str = ""

    model_config = ConfigDict(populate_by_name=True)


class HumanCorrection(BaseModel):
    """Result of the external human review for one invoice."""
    invoice_id: str = Field(..., alias="invoiceId")
    vendor: str
    corrections: List[FieldCorrection] = Field(default_factory=list)
    final_decision: FinalDecision = Field(..., alias="finalDecision")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def approved(self) -> bool:
        return self.final_decision == FinalDecision.APPROVED


# ============================================================================
# Memories
# ============================================================================

@dataclass(frozen=True)
class VendorMemory:
    """Qualitative, unscored fact about a vendor's document conventions."""
    id: Optional[int]
    vendor: str
    key: str
    value: Any = None


@dataclass(frozen=True)
class CorrectionMemory:
    """Scored correction for a (vendor, field) pair."""
    id: Optional[int]
    vendor: str
    field: str
    pattern: dict[str, Any]
    suggested_value: Any
    confidence: float


# ============================================================================
# Audit trail
# ============================================================================

class AuditStep(str, Enum):
    """Pipeline stages, in execution order."""
    RECALL = "recall"
    APPLY = "apply"
    DECIDE = "decide"
    LEARN = "learn"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuditEntry:
    step: AuditStep
    details: str
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


# ============================================================================
# Applied memories (one variant per correction kind)
# ============================================================================

class MemoryLevel(str, Enum):
    """Whether an applied rule is backed by a vendor or a correction memory"""
    VENDOR = "vendor"
    CORRECTION = "correction"


class CorrectionKind(str, Enum):
    DATE_INFERENCE = "date_inference"
    PO_SUGGESTION = "po_suggestion"
    TAX_RECOMPUTE = "tax_recompute"
    CURRENCY_RECOVERY = "currency_recovery"
    DISCOUNT_TERMS = "discount_terms"
    SKU_MAPPING = "sku_mapping"
    DUPLICATE_FLAG = "duplicate_flag"


@dataclass(frozen=True)
class AppliedMemory:
    """Record that a rule fired during rule application.

    Subclasses fix `kind`, `level` and `memory_key` as class attributes and
    only carry the values their correction produced. For vendor-level
    records `memory_key` is the vendor memory key; for correction-level
    records it is the field name.
    """
    kind: ClassVar[CorrectionKind]
    level: ClassVar[MemoryLevel]
    memory_key: ClassVar[str]

    vendor: str

    @property
    def field(self) -> Optional[str]:
        if self.level == MemoryLevel.CORRECTION:
            return self.memory_key
        return None


@dataclass(frozen=True)
class ServiceDateInferred(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.DATE_INFERENCE
    level: ClassVar[MemoryLevel] = MemoryLevel.VENDOR
    memory_key: ClassVar[str] = "serviceDateFromLeistungsdatum"

    service_date: str
    label: str


@dataclass(frozen=True)
class PurchaseOrderSuggested(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.PO_SUGGESTION
    level: ClassVar[MemoryLevel] = MemoryLevel.CORRECTION
    memory_key: ClassVar[str] = "poNumber"

    po_number: str


@dataclass(frozen=True)
class TaxRecomputed(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.TAX_RECOMPUTE
    level: ClassVar[MemoryLevel] = MemoryLevel.CORRECTION
    memory_key: ClassVar[str] = "vat_included_recompute"

    net_total: float
    tax_total: float


@dataclass(frozen=True)
class CurrencyRecovered(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.CURRENCY_RECOVERY
    level: ClassVar[MemoryLevel] = MemoryLevel.CORRECTION
    memory_key: ClassVar[str] = "currency"

    currency: str


@dataclass(frozen=True)
class DiscountTermsRecorded(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.DISCOUNT_TERMS
    level: ClassVar[MemoryLevel] = MemoryLevel.VENDOR
    memory_key: ClassVar[str] = "skonto_terms"

    terms: str


@dataclass(frozen=True)
class SkuMapped(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.SKU_MAPPING
    level: ClassVar[MemoryLevel] = MemoryLevel.CORRECTION
    memory_key: ClassVar[str] = "lineItems[0].sku"

    line_index: int
    sku: str


@dataclass(frozen=True)
class DuplicateFlagged(AppliedMemory):
    kind: ClassVar[CorrectionKind] = CorrectionKind.DUPLICATE_FLAG
    level: ClassVar[MemoryLevel] = MemoryLevel.VENDOR
    memory_key: ClassVar[str] = "duplicate_detection"

    duplicate_of: tuple[str, ...]


@dataclass(frozen=True)
class RuleOutcome:
    """What a fired rule reports back: an explanation plus its applied memory."""
    description: str
    memory: AppliedMemory


# ============================================================================
# Pipeline context and output
# ============================================================================

@dataclass(frozen=True)
class MemoryContext:
    """Everything Recall gathered for one invoice.

    Computed once and passed unchanged into rule application and decision.
    Purchase orders and same-number invoices are snapshot reads; they may be
    stale relative to concurrent writers.
    """
    invoice_id: str
    vendor: str
    vendor_memories: tuple[VendorMemory, ...] = ()
    correction_memories: tuple[CorrectionMemory, ...] = ()
    purchase_orders: tuple[PurchaseOrder, ...] = ()
    same_number_invoices: tuple[Invoice, ...] = ()

    def high_confidence_memories(self, threshold: float) -> list[CorrectionMemory]:
        return [m for m in self.correction_memories if m.confidence >= threshold]


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants of the correction pipeline.

    Defaults reproduce the production behavior; `config.Settings` builds an
    instance from environment variables.
    """
    auto_approve_threshold: float = 0.9
    high_confidence_memory_threshold: float = 0.7
    applied_memory_boost: float = 0.05
    high_confidence_memory_boost: float = 0.03
    reinforcement_delta: float = 0.1
    approved_initial_confidence: float = 0.7
    rejected_initial_confidence: float = 0.3
    po_match_window_days: int = 30
    duplicate_window_days: int = 2


@dataclass
class EngineOutput:
    """Result of one `process_invoice` invocation.

    `audit_persisted` is False when the pipeline completed but the audit
    trail could not be written to the audit sink.
    """
    invoice_id: str
    vendor: str
    normalized_invoice: NormalizedInvoiceFields
    proposed_corrections: list[str]
    requires_human_review: bool
    reasoning: str
    confidence_score: float
    memory_updates: list[str]
    audit_trail: list[AuditEntry]
    audit_persisted: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "vendor": self.vendor,
            "normalizedInvoice": self.normalized_invoice.to_document(),
            "proposedCorrections": list(self.proposed_corrections),
            "requiresHumanReview": self.requires_human_review,
            "reasoning": self.reasoning,
            "confidenceScore": self.confidence_score,
            "memoryUpdates": list(self.memory_updates),
            "auditTrail": [entry.to_dict() for entry in self.audit_trail],
            "auditPersisted": self.audit_persisted,
        }
