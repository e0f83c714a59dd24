"""Rules learned for Freight & Co invoices."""

from typing import Optional

from domain.memory.models import (
    DiscountTermsRecorded,
    MemoryContext,
    NormalizedInvoiceFields,
    RuleOutcome,
    SkuMapped,
)
from .base import CorrectionRule


SKONTO_TERMS = "2% Skonto within 10 days"
SHIPPING_KEYWORDS = ("seefracht", "shipping")
FREIGHT_SKU = "FREIGHT"


class DiscountTermsRule(CorrectionRule):
    """Record Skonto payment terms mentioned in the raw text."""

    name = "skonto_terms"

    def __init__(self, terms: str = SKONTO_TERMS):
        self.terms = terms

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if fields.discount_terms:
            return None
        if "skonto" not in (raw_text or "").lower():
            return None

        fields.discount_terms = self.terms

        return RuleOutcome(
            description=f"Recorded discountTerms from Skonto text in rawText for {context.vendor}.",
            memory=DiscountTermsRecorded(vendor=context.vendor, terms=self.terms)
        )


class ShippingSkuMappingRule(CorrectionRule):
    """Map a SKU-less shipping line (first line only) to the FREIGHT SKU."""

    name = "shipping_sku_mapping"

    def __init__(self, keywords: tuple[str, ...] = SHIPPING_KEYWORDS, sku: str = FREIGHT_SKU):
        self.keywords = keywords
        self.sku = sku

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if not fields.line_items:
            return None

        line = fields.line_items[0]
        if line.sku:
            return None

        description = (line.description or "").lower()
        if not any(keyword in description for keyword in self.keywords):
            return None

        line.sku = self.sku

        return RuleOutcome(
            description=f'Mapped description "{line.description}" to SKU {self.sku} for {context.vendor}.',
            memory=SkuMapped(vendor=context.vendor, line_index=0, sku=self.sku)
        )
