"""MemoryEngine - orchestrates recall, rule application, decision and learning.

Usage:
    engine = MemoryEngine(
        invoices=invoice_repo,
        purchase_orders=po_repo,
        memory_store=memory_store,
        human_corrections=correction_repo,
        audit_sink=audit_sink,
    )
    output = engine.process_invoice("INV-A-001")
"""

import logging
import time
from typing import Optional

from .decision import decide
from .errors import AuditPersistenceError
from .learning import ReinforcementLearner
from .models import AuditEntry, EngineConfig, EngineOutput
from .ports import (
    AuditSinkPort,
    HumanCorrectionRepositoryPort,
    InvoiceRepositoryPort,
    MemoryStorePort,
    PurchaseOrderRepositoryPort,
)
from .recall import MemoryRecall
from .rules import RuleApplicationEngine, RuleRegistry, build_default_registry

logger = logging.getLogger(__name__)


class MemoryEngine:
    """Runs the four-stage correction pipeline for single invoices.

    Stages run strictly in sequence and each consumes the previous stage's
    output. Audit entries from all stages are collected in stage order and
    appended to the audit sink once, after learning.
    """

    def __init__(
        self,
        invoices: InvoiceRepositoryPort,
        purchase_orders: PurchaseOrderRepositoryPort,
        memory_store: MemoryStorePort,
        human_corrections: HumanCorrectionRepositoryPort,
        audit_sink: AuditSinkPort,
        config: Optional[EngineConfig] = None,
        registry: Optional[RuleRegistry] = None
    ):
        self.invoices = invoices
        self.audit_sink = audit_sink
        self.config = config or EngineConfig()

        self.recall = MemoryRecall(memory_store, invoices, purchase_orders)
        self.rules = RuleApplicationEngine(registry or build_default_registry(self.config))
        self.learner = ReinforcementLearner(memory_store, human_corrections, self.config)

    def process_invoice(self, invoice_id: str) -> Optional[EngineOutput]:
        """Process one stored invoice.

        Args:
            invoice_id: Invoice identifier

        Returns:
            EngineOutput, or None if the invoice does not exist

        Raises:
            MemoryStoreError: If a repository fails before the audit append
            InvoiceValidationError: If the stored invoice is malformed
        """
        start_time = time.time()

        invoice = self.invoices.get_invoice_by_id(invoice_id)
        if invoice is None:
            logger.info(f"Invoice {invoice_id} not found")
            return None

        recalled = self.recall.recall(invoice)
        applied = self.rules.apply(invoice, recalled.context)
        decision = decide(invoice, recalled.context, applied.applied_memories, self.config)
        learned = self.learner.learn(invoice)

        audit_trail: list[AuditEntry] = [
            *recalled.audit,
            *applied.audit,
            *decision.audit,
            *learned.audit,
        ]

        output = EngineOutput(
            invoice_id=invoice.invoice_id,
            vendor=invoice.vendor,
            normalized_invoice=applied.normalized,
            proposed_corrections=applied.proposed_corrections,
            requires_human_review=decision.requires_human_review,
            reasoning=decision.reasoning,
            confidence_score=decision.confidence_score,
            memory_updates=learned.memory_updates,
            audit_trail=audit_trail,
        )

        try:
            self.audit_sink.append_audit_entries(invoice.invoice_id, audit_trail)
        except AuditPersistenceError as e:
            # The result is still returned; the durable trail is missing.
            output.audit_persisted = False
            logger.error(
                f"Audit trail for invoice {invoice.invoice_id} could not be persisted: {e}",
                extra={"invoice_id": invoice.invoice_id, "vendor": invoice.vendor},
                exc_info=True
            )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Processed invoice {invoice.invoice_id}: confidence={decision.confidence_score:.2f}, "
            f"review={decision.requires_human_review}, corrections={len(applied.proposed_corrections)}, "
            f"memory_updates={len(learned.memory_updates)}, duration_ms={duration_ms}",
            extra={"invoice_id": invoice.invoice_id, "vendor": invoice.vendor}
        )

        return output
