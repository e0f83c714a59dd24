"""Rules learned for Supplier GmbH invoices.

- Service date: the service date is printed next to a "Leistungsdatum" label
  but is not extracted.
- PO number: the PO number is usually missing and can be recovered from the
  vendor's purchase orders by date proximity and SKU overlap.
"""

import logging
import re
from typing import Optional

from domain.memory.date_parser import german_to_iso, parse_invoice_date
from domain.memory.models import (
    MemoryContext,
    NormalizedInvoiceFields,
    PurchaseOrderSuggested,
    RuleOutcome,
    ServiceDateInferred,
)
from .base import CorrectionRule

logger = logging.getLogger(__name__)


class ServiceDateInferenceRule(CorrectionRule):
    """Fill serviceDate from a labeled DD.MM.YYYY date in the raw text."""

    name = "service_date_inference"

    def __init__(self, label: str = "Leistungsdatum"):
        self.label = label
        self.pattern = re.compile(rf"{re.escape(label)}:\s*(\d{{1,2}}\.\d{{1,2}}\.\d{{4}})")

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if fields.service_date:
            return None

        match = self.pattern.search(raw_text or "")
        if not match:
            return None

        iso_date = german_to_iso(match.group(1))
        if iso_date is None:
            logger.debug(f"Ignoring malformed {self.label} date '{match.group(1)}'")
            return None

        fields.service_date = iso_date

        return RuleOutcome(
            description=(
                f'Set serviceDate to {iso_date} based on label "{self.label}" '
                f'in rawText for {context.vendor}.'
            ),
            memory=ServiceDateInferred(vendor=context.vendor, service_date=iso_date, label=self.label)
        )


class PurchaseOrderSuggestionRule(CorrectionRule):
    """Suggest poNumber when exactly one purchase order matches.

    A purchase order matches when its date lies within `window_days`
    (inclusive) of the invoice date and it shares at least one non-null SKU
    with the invoice lines. Zero or several matches leave the field alone.
    """

    name = "po_suggestion"

    def __init__(self, window_days: int = 30):
        self.window_days = window_days

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if fields.po_number:
            return None

        invoice_date = parse_invoice_date(fields.invoice_date)
        if invoice_date is None:
            return None

        invoice_skus = {line.sku for line in fields.line_items if line.sku}
        if not invoice_skus:
            return None

        candidates = []
        for po in context.purchase_orders:
            po_date = parse_invoice_date(po.date)
            if po_date is None:
                continue
            if abs((invoice_date - po_date).days) > self.window_days:
                continue
            if invoice_skus & po.skus:
                candidates.append(po)

        if len(candidates) != 1:
            logger.debug(
                f"PO suggestion skipped for invoice {context.invoice_id}: "
                f"{len(candidates)} candidate(s)"
            )
            return None

        po_number = candidates[0].po_number
        fields.po_number = po_number

        return RuleOutcome(
            description=(
                f"Suggested poNumber={po_number} based on single matching PO within "
                f"{self.window_days} days and SKU overlap for {context.vendor}."
            ),
            memory=PurchaseOrderSuggested(vendor=context.vendor, po_number=po_number)
        )
