"""RuleApplicationEngine - runs the vendor's rules against a copy of the invoice"""

import logging
from dataclasses import dataclass

from domain.memory.models import (
    AppliedMemory,
    AuditEntry,
    AuditStep,
    Invoice,
    MemoryContext,
    NormalizedInvoiceFields,
)
from .base import RuleRegistry


logger = logging.getLogger(__name__)


@dataclass
class RuleApplicationResult:
    normalized: NormalizedInvoiceFields
    proposed_corrections: list[str]
    applied_memories: list[AppliedMemory]
    audit: list[AuditEntry]


class RuleApplicationEngine:
    """Applies registered correction rules to an invoice.

    The received invoice is never modified; rules work on a deep copy of its
    field set. Every fired rule contributes one proposed correction, one
    applied-memory record and one audit entry, and a summary entry closes
    the stage.
    """

    def __init__(self, registry: RuleRegistry):
        self.registry = registry

    def apply(self, invoice: Invoice, context: MemoryContext) -> RuleApplicationResult:
        """Run all rules registered for the invoice's vendor.

        Args:
            invoice: Invoice as received
            context: Memory context from recall

        Returns:
            RuleApplicationResult with the normalized fields and explanations
        """
        normalized = NormalizedInvoiceFields.from_fields(invoice.fields)
        proposed_corrections: list[str] = []
        applied_memories: list[AppliedMemory] = []
        audit: list[AuditEntry] = []

        for rule in self.registry.rules_for(invoice.vendor):
            outcome = rule.apply(normalized, invoice.raw_text, context)
            if outcome is None:
                logger.debug(f"Rule '{rule.name}' did not fire for invoice {invoice.invoice_id}")
                continue

            proposed_corrections.append(outcome.description)
            applied_memories.append(outcome.memory)
            audit.append(AuditEntry(step=AuditStep.APPLY, details=outcome.description))
            logger.debug(f"Rule '{rule.name}' fired for invoice {invoice.invoice_id}")

        audit.append(AuditEntry(
            step=AuditStep.APPLY,
            details=f"Applied {len(applied_memories)} memory rule(s) to invoice {invoice.invoice_id}."
        ))

        logger.info(
            f"Rule application completed for invoice {invoice.invoice_id}: "
            f"{len(applied_memories)} rule(s) fired",
            extra={"invoice_id": invoice.invoice_id, "vendor": invoice.vendor}
        )

        return RuleApplicationResult(
            normalized=normalized,
            proposed_corrections=proposed_corrections,
            applied_memories=applied_memories,
            audit=audit,
        )
