"""Rules learned for Parts AG invoices.

Parts AG prints gross prices with VAT already included, so extraction
reports the gross amount as net. It also tends to omit the currency from the
header while printing it in the footer.
"""

import re
from typing import Optional

from domain.memory.models import (
    CurrencyRecovered,
    MemoryContext,
    NormalizedInvoiceFields,
    RuleOutcome,
    TaxRecomputed,
)
from .base import CorrectionRule


VAT_INCLUDED_PHRASES = (
    "prices incl. vat",
    "mwst. inkl",
    "vat already included",
)


class TaxInclusiveRecomputationRule(CorrectionRule):
    """Recompute net and tax totals from gross when prices include VAT."""

    name = "vat_included_recompute"

    def __init__(self, phrases: tuple[str, ...] = VAT_INCLUDED_PHRASES):
        self.phrases = phrases

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        text = (raw_text or "").lower()
        if not any(phrase in text for phrase in self.phrases):
            return None

        gross = fields.gross_total
        rate = fields.tax_rate
        if gross is None or rate is None or 1 + rate <= 0:
            return None

        corrected_net = round(gross / (1 + rate), 2)
        corrected_tax = round(gross - corrected_net, 2)

        if corrected_net == fields.net_total and corrected_tax == fields.tax_total:
            return None

        fields.net_total = corrected_net
        fields.tax_total = corrected_tax

        return RuleOutcome(
            description=(
                "Recomputed netTotal and taxTotal from grossTotal and taxRate because "
                "rawText indicates prices include VAT (MwSt. inkl.)."
            ),
            memory=TaxRecomputed(vendor=context.vendor, net_total=corrected_net, tax_total=corrected_tax)
        )


class CurrencyRecoveryRule(CorrectionRule):
    """Recover a missing currency from a "Currency: XXX" label."""

    name = "currency_recovery"

    pattern = re.compile(r"Currency:\s*([A-Z]{3})\b")

    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        if fields.currency:
            return None

        match = self.pattern.search(raw_text or "")
        if not match:
            return None

        currency = match.group(1)
        fields.currency = currency

        return RuleOutcome(
            description=f"Recovered missing currency as {currency} from rawText for {context.vendor}.",
            memory=CurrencyRecovered(vendor=context.vendor, currency=currency)
        )
