"""Duplicate invoice detection (applies to every vendor)."""

import logging
from typing import Optional

from domain.memory.date_parser import days_between
from domain.memory.models import (
    DuplicateFlagged,
    MemoryContext,
    NormalizedInvoiceFields,
    RuleOutcome,
)
from .base import CorrectionRule

logger = logging.getLogger(__name__)


class DuplicateDetectionRule(CorrectionRule):
    """Flag invoices that repeat another invoice's vendor and number.

    Another stored invoice counts as the original when it has a different
    id, the same vendor and invoice number, and an invoice date within
    `window_days` (inclusive). Invoices whose dates cannot be parsed are
    never considered duplicates.

    The candidate list comes from recall and is a snapshot; an invoice
    inserted concurrently may not be seen.
    """

    name = "duplicate_detection"

    def __init__(self, window_days: int = 2):
        self.window_days = window_days

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if fields.duplicate:
            return None

        duplicate_of = []
        for other in context.same_number_invoices:
            if other.invoice_id == context.invoice_id:
                continue
            if other.vendor != context.vendor or other.fields.invoice_number != fields.invoice_number:
                continue
            distance = days_between(fields.invoice_date, other.fields.invoice_date)
            if distance is not None and distance <= self.window_days:
                duplicate_of.append(other.invoice_id)

        if not duplicate_of:
            return None

        fields.duplicate = True
        logger.info(
            f"Invoice {context.invoice_id} duplicates {', '.join(duplicate_of)}",
            extra={"invoice_id": context.invoice_id, "vendor": context.vendor}
        )

        return RuleOutcome(
            description="Flagged as duplicate invoice based on same vendor + invoiceNumber + close dates.",
            memory=DuplicateFlagged(vendor=context.vendor, duplicate_of=tuple(duplicate_of))
        )
