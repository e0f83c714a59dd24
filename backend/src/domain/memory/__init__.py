"""Invoice memory domain.

Correction pipeline that normalizes pre-extracted invoices with learned,
vendor-specific heuristics and reinforces them from human review:

    Recall -> Rule Application -> Decision -> Learning
"""

from .decision import DecisionResult, calculate_confidence, decide
from .engine import MemoryEngine
from .errors import (
    AuditPersistenceError,
    DuplicateCorrectionMemoryError,
    InvoiceValidationError,
    MemoryEngineError,
    MemoryStoreError,
)
from .learning import KeyedLock, LearningResult, ReinforcementLearner, adjust_confidence
from .models import (
    AppliedMemory,
    AuditEntry,
    AuditStep,
    CorrectionKind,
    CorrectionMemory,
    CurrencyRecovered,
    DiscountTermsRecorded,
    DuplicateFlagged,
    EngineConfig,
    EngineOutput,
    FieldCorrection,
    FinalDecision,
    HumanCorrection,
    Invoice,
    InvoiceFields,
    LineItem,
    MemoryContext,
    MemoryLevel,
    NormalizedInvoiceFields,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderSuggested,
    RuleOutcome,
    ServiceDateInferred,
    SkuMapped,
    TaxRecomputed,
    VendorMemory,
)
from .ports import (
    AuditSinkPort,
    HumanCorrectionRepositoryPort,
    InvoiceRepositoryPort,
    MemoryStorePort,
    PurchaseOrderRepositoryPort,
)
from .recall import MemoryRecall, RecallResult

__all__ = [
    "MemoryEngine",
    "MemoryRecall",
    "RecallResult",
    "DecisionResult",
    "calculate_confidence",
    "decide",
    "KeyedLock",
    "LearningResult",
    "ReinforcementLearner",
    "adjust_confidence",
    # Errors
    "MemoryEngineError",
    "MemoryStoreError",
    "AuditPersistenceError",
    "DuplicateCorrectionMemoryError",
    "InvoiceValidationError",
    # Ports
    "InvoiceRepositoryPort",
    "PurchaseOrderRepositoryPort",
    "MemoryStorePort",
    "HumanCorrectionRepositoryPort",
    "AuditSinkPort",
    # Models
    "AppliedMemory",
    "AuditEntry",
    "AuditStep",
    "CorrectionKind",
    "CorrectionMemory",
    "CurrencyRecovered",
    "DiscountTermsRecorded",
    "DuplicateFlagged",
    "EngineConfig",
    "EngineOutput",
    "FieldCorrection",
    "FinalDecision",
    "HumanCorrection",
    "Invoice",
    "InvoiceFields",
    "LineItem",
    "MemoryContext",
    "MemoryLevel",
    "NormalizedInvoiceFields",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchaseOrderSuggested",
    "RuleOutcome",
    "ServiceDateInferred",
    "SkuMapped",
    "TaxRecomputed",
    "VendorMemory",
]
