"""Decision stage: final confidence and auto-approve / review verdict.

Formula:
    confidence = min(1, base + applied_boost * applied_count
                            + memory_boost * high_confidence_memory_count)

An invoice needs human review when confidence < auto_approve_threshold.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .models import AppliedMemory, AuditEntry, AuditStep, EngineConfig, Invoice, MemoryContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    requires_human_review: bool
    confidence_score: float
    reasoning: str
    audit: list[AuditEntry]


def calculate_confidence(
    base_confidence: float,
    applied_count: int,
    high_confidence_memory_count: int,
    config: Optional[EngineConfig] = None
) -> float:
    """Combine base extraction confidence with rule and memory boosts.

    Args:
        base_confidence: Extraction confidence of the invoice (0.0-1.0)
        applied_count: Number of rules that fired
        high_confidence_memory_count: Correction memories at or above the
            high-confidence threshold
        config: Engine configuration (boost sizes)

    Returns:
        Score between 0.0 and 1.0
    """
    config = config or EngineConfig()
    confidence = (
        base_confidence
        + config.applied_memory_boost * applied_count
        + config.high_confidence_memory_boost * high_confidence_memory_count
    )
    return round(max(0.0, min(1.0, confidence)), 4)


def decide(
    invoice: Invoice,
    context: MemoryContext,
    applied_memories: Sequence[AppliedMemory],
    config: Optional[EngineConfig] = None
) -> DecisionResult:
    """Compute the verdict for an invoice. Pure apart from logging."""
    config = config or EngineConfig()

    high_confidence = context.high_confidence_memories(config.high_confidence_memory_threshold)
    confidence = calculate_confidence(
        invoice.confidence,
        len(applied_memories),
        len(high_confidence),
        config
    )
    requires_human_review = confidence < config.auto_approve_threshold

    reasoning_parts = []
    if applied_memories:
        reasoning_parts.append(f"Applied {len(applied_memories)} learned memory rule(s).")
    reasoning_parts.append(
        f"Base extraction confidence: {invoice.confidence:.2f}; final confidence: {confidence:.2f}."
    )

    details = f"requiresHumanReview={str(requires_human_review).lower()}, confidenceScore={confidence:.2f}"
    logger.info(
        f"Decision for invoice {invoice.invoice_id}: {details}",
        extra={"invoice_id": invoice.invoice_id, "vendor": invoice.vendor}
    )

    return DecisionResult(
        requires_human_review=requires_human_review,
        confidence_score=confidence,
        reasoning=" ".join(reasoning_parts),
        audit=[AuditEntry(step=AuditStep.DECIDE, details=details)],
    )
