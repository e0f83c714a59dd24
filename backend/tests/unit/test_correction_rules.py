"""Unit tests for vendor correction rules

Tests cover:
- Service date inference from "Leistungsdatum" (Supplier GmbH)
- Purchase order suggestion by date window and SKU overlap (Supplier GmbH)
- VAT-inclusive recomputation and currency recovery (Parts AG)
- Skonto terms and shipping SKU mapping (Freight & Co)
- Rule registry dispatch and the rule application engine
"""

import pytest

from domain.memory import (
    AuditStep,
    CurrencyRecovered,
    MemoryContext,
    MemoryLevel,
    NormalizedInvoiceFields,
    PurchaseOrder,
    PurchaseOrderSuggested,
    ServiceDateInferred,
    SkuMapped,
    TaxRecomputed,
)
from domain.memory.rules import (
    FREIGHT_AND_CO,
    PARTS_AG,
    SUPPLIER_GMBH,
    CurrencyRecoveryRule,
    DiscountTermsRule,
    DuplicateDetectionRule,
    PurchaseOrderSuggestionRule,
    RuleApplicationEngine,
    RuleRegistry,
    ServiceDateInferenceRule,
    ShippingSkuMappingRule,
    TaxInclusiveRecomputationRule,
    build_default_registry,
)
from fixtures.in_memory_repositories import make_invoice


def fields_of(invoice) -> NormalizedInvoiceFields:
    return NormalizedInvoiceFields.from_fields(invoice.fields)


def context_for(invoice, **kwargs) -> MemoryContext:
    return MemoryContext(invoice_id=invoice.invoice_id, vendor=invoice.vendor, **kwargs)


def purchase_order(po_number, date, *skus, vendor=SUPPLIER_GMBH) -> PurchaseOrder:
    return PurchaseOrder(
        po_number=po_number,
        vendor=vendor,
        date=date,
        line_items=[{"sku": sku, "qty": 1} for sku in skus],
    )


class TestServiceDateInference:
    """Test serviceDate inference from the Leistungsdatum label"""

    def test_sets_service_date_from_label(self):
        invoice = make_invoice("INV-A-1", SUPPLIER_GMBH, raw_text="Rechnung\nLeistungsdatum: 05.03.2024\n")
        fields = fields_of(invoice)

        outcome = ServiceDateInferenceRule().apply(fields, invoice.raw_text, context_for(invoice))

        assert fields.service_date == "2024-03-05"
        assert "Leistungsdatum" in outcome.description
        assert isinstance(outcome.memory, ServiceDateInferred)
        assert outcome.memory.level == MemoryLevel.VENDOR
        assert outcome.memory.service_date == "2024-03-05"

    def test_does_not_override_existing_service_date(self):
        invoice = make_invoice(
            "INV-A-1", SUPPLIER_GMBH,
            raw_text="Leistungsdatum: 05.03.2024",
            service_date="2024-03-01"
        )
        fields = fields_of(invoice)

        assert ServiceDateInferenceRule().apply(fields, invoice.raw_text, context_for(invoice)) is None
        assert fields.service_date == "2024-03-01"

    @pytest.mark.parametrize("raw_text", [
        "",
        "Lieferdatum: 05.03.2024",
        "Leistungsdatum: 2024-03-05",
        "Leistungsdatum: 31.02.2024",
    ])
    def test_missing_or_malformed_label_does_not_fire(self, raw_text):
        invoice = make_invoice("INV-A-1", SUPPLIER_GMBH, raw_text=raw_text)
        fields = fields_of(invoice)

        assert ServiceDateInferenceRule().apply(fields, raw_text, context_for(invoice)) is None
        assert fields.service_date is None


class TestPurchaseOrderSuggestion:
    """Test PO suggestion by date proximity and SKU overlap"""

    def make(self):
        return make_invoice(
            "INV-A-1", SUPPLIER_GMBH,
            invoice_date="18.01.2024",
            line_items=[{"sku": "WIDGET-002", "qty": 1}]
        )

    def test_single_candidate_sets_po_number(self):
        invoice = self.make()
        fields = fields_of(invoice)
        context = context_for(invoice, purchase_orders=(
            purchase_order("PO-1", "2024-01-15", "WIDGET-002"),
            purchase_order("PO-2", "2024-01-10", "OTHER"),
        ))

        outcome = PurchaseOrderSuggestionRule().apply(fields, invoice.raw_text, context)

        assert fields.po_number == "PO-1"
        assert isinstance(outcome.memory, PurchaseOrderSuggested)
        assert outcome.memory.field == "poNumber"

    def test_two_candidates_leave_po_number_unset(self):
        invoice = self.make()
        fields = fields_of(invoice)
        context = context_for(invoice, purchase_orders=(
            purchase_order("PO-1", "2024-01-15", "WIDGET-002"),
            purchase_order("PO-2", "2024-01-20", "WIDGET-002"),
        ))

        assert PurchaseOrderSuggestionRule().apply(fields, invoice.raw_text, context) is None
        assert fields.po_number is None

    def test_window_is_inclusive(self):
        """Test a PO exactly 30 days away still matches, 31 days does not"""
        invoice = self.make()

        within = context_for(invoice, purchase_orders=(purchase_order("PO-1", "2023-12-19", "WIDGET-002"),))
        fields = fields_of(invoice)
        assert PurchaseOrderSuggestionRule(window_days=30).apply(fields, "", within) is not None

        outside = context_for(invoice, purchase_orders=(purchase_order("PO-1", "2023-12-18", "WIDGET-002"),))
        fields = fields_of(invoice)
        assert PurchaseOrderSuggestionRule(window_days=30).apply(fields, "", outside) is None

    def test_invoice_without_skus_does_not_fire(self):
        invoice = make_invoice("INV-A-1", SUPPLIER_GMBH, line_items=[{"description": "Service"}])
        context = context_for(invoice, purchase_orders=(purchase_order("PO-1", "2024-01-01", "WIDGET-002"),))

        assert PurchaseOrderSuggestionRule().apply(fields_of(invoice), "", context) is None

    def test_existing_po_number_is_kept(self):
        invoice = make_invoice("INV-A-1", SUPPLIER_GMBH, po_number="PO-9", line_items=[{"sku": "WIDGET-002"}])
        context = context_for(invoice, purchase_orders=(purchase_order("PO-1", "2024-01-01", "WIDGET-002"),))
        fields = fields_of(invoice)

        assert PurchaseOrderSuggestionRule().apply(fields, "", context) is None
        assert fields.po_number == "PO-9"


class TestTaxInclusiveRecomputation:
    """Test net/tax recomputation when prices include VAT"""

    def test_recomputes_totals(self):
        invoice = make_invoice(
            "INV-B-1", PARTS_AG,
            raw_text="Alle Preise MwSt. inkl.",
            gross_total=119.00, tax_rate=0.19, net_total=119.00, tax_total=0.0
        )
        fields = fields_of(invoice)

        outcome = TaxInclusiveRecomputationRule().apply(fields, invoice.raw_text, context_for(invoice))

        assert fields.net_total == 100.00
        assert fields.tax_total == 19.00
        assert isinstance(outcome.memory, TaxRecomputed)
        assert outcome.memory.field == "vat_included_recompute"

    @pytest.mark.parametrize("phrase", ["Prices incl. VAT", "VAT already included", "MWST. INKL."])
    def test_phrases_are_case_insensitive(self, phrase):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text=phrase, gross_total=119.0, tax_rate=0.19)

        assert TaxInclusiveRecomputationRule().apply(fields_of(invoice), phrase, context_for(invoice)) is not None

    def test_already_correct_totals_do_not_fire(self):
        invoice = make_invoice(
            "INV-B-1", PARTS_AG, raw_text="MwSt. inkl.",
            gross_total=119.0, tax_rate=0.19, net_total=100.0, tax_total=19.0
        )

        assert TaxInclusiveRecomputationRule().apply(fields_of(invoice), invoice.raw_text, context_for(invoice)) is None

    def test_missing_tax_rate_does_not_fire(self):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text="MwSt. inkl.", gross_total=119.0)

        assert TaxInclusiveRecomputationRule().apply(fields_of(invoice), invoice.raw_text, context_for(invoice)) is None

    def test_without_phrase_does_not_fire(self):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text="Netto 100", gross_total=119.0, tax_rate=0.19)

        assert TaxInclusiveRecomputationRule().apply(fields_of(invoice), invoice.raw_text, context_for(invoice)) is None


class TestCurrencyRecovery:

    def test_recovers_currency_from_label(self):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text="Total 595.00\nCurrency: EUR\n")
        fields = fields_of(invoice)

        outcome = CurrencyRecoveryRule().apply(fields, invoice.raw_text, context_for(invoice))

        assert fields.currency == "EUR"
        assert isinstance(outcome.memory, CurrencyRecovered)

    @pytest.mark.parametrize("raw_text", ["Currency: eur", "Currency: EURO", "Waehrung: EUR", ""])
    def test_malformed_codes_are_ignored(self, raw_text):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text=raw_text)
        fields = fields_of(invoice)

        assert CurrencyRecoveryRule().apply(fields, raw_text, context_for(invoice)) is None
        assert fields.currency is None

    def test_present_currency_is_kept(self):
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text="Currency: USD", currency="EUR")

        assert CurrencyRecoveryRule().apply(fields_of(invoice), invoice.raw_text, context_for(invoice)) is None


class TestFreightRules:
    """Test Skonto terms and shipping SKU mapping"""

    def test_skonto_sets_discount_terms(self):
        invoice = make_invoice("INV-C-1", FREIGHT_AND_CO, raw_text="2% SKONTO bei Zahlung in 10 Tagen")
        fields = fields_of(invoice)

        outcome = DiscountTermsRule().apply(fields, invoice.raw_text, context_for(invoice))

        assert fields.discount_terms == "2% Skonto within 10 days"
        assert outcome.memory.level == MemoryLevel.VENDOR

    def test_shipping_line_gets_freight_sku(self):
        invoice = make_invoice(
            "INV-C-1", FREIGHT_AND_CO,
            line_items=[{"description": "Seefracht Hamburg", "qty": 1}, {"description": "Shipping insurance"}]
        )
        fields = fields_of(invoice)

        outcome = ShippingSkuMappingRule().apply(fields, "", context_for(invoice))

        assert fields.line_items[0].sku == "FREIGHT"
        assert fields.line_items[1].sku is None
        assert isinstance(outcome.memory, SkuMapped)
        assert outcome.memory.field == "lineItems[0].sku"

    def test_line_with_sku_is_not_remapped(self):
        invoice = make_invoice(
            "INV-C-1", FREIGHT_AND_CO,
            line_items=[{"sku": "SHIP-1", "description": "Shipping"}]
        )

        assert ShippingSkuMappingRule().apply(fields_of(invoice), "", context_for(invoice)) is None

    def test_no_line_items_does_not_fire(self):
        invoice = make_invoice("INV-C-1", FREIGHT_AND_CO)

        assert ShippingSkuMappingRule().apply(fields_of(invoice), "", context_for(invoice)) is None


class TestRuleRegistry:

    def test_vendor_rules_run_before_global_rules(self):
        registry = build_default_registry()

        names = [rule.name for rule in registry.rules_for(PARTS_AG)]

        assert names == ["vat_included_recompute", "currency_recovery", "duplicate_detection"]

    def test_unknown_vendor_only_gets_global_rules(self):
        registry = build_default_registry()

        rules = registry.rules_for("Unknown Ltd")

        assert len(rules) == 1
        assert isinstance(rules[0], DuplicateDetectionRule)

    def test_new_vendor_can_be_registered(self):
        registry = RuleRegistry().register(CurrencyRecoveryRule(), vendor="New Vendor")

        assert registry.vendors == ["New Vendor"]
        assert [r.name for r in registry.rules_for("New Vendor")] == ["currency_recovery"]


class TestRuleApplicationEngine:
    """Test the engine that runs registered rules"""

    def test_other_vendors_rules_never_fire(self):
        """Test a Leistungsdatum label is ignored for Parts AG"""
        invoice = make_invoice("INV-B-1", PARTS_AG, raw_text="Leistungsdatum: 05.03.2024")

        result = RuleApplicationEngine(build_default_registry()).apply(invoice, context_for(invoice))

        assert result.normalized.service_date is None
        assert result.applied_memories == []

    def test_original_invoice_is_not_mutated(self):
        invoice = make_invoice(
            "INV-C-1", FREIGHT_AND_CO,
            raw_text="Skonto",
            line_items=[{"description": "Shipping"}]
        )

        result = RuleApplicationEngine(build_default_registry()).apply(invoice, context_for(invoice))

        assert result.normalized.line_items[0].sku == "FREIGHT"
        assert invoice.fields.line_items[0].sku is None
        assert result.normalized.discount_terms == "2% Skonto within 10 days"

    def test_audit_has_one_entry_per_fired_rule_plus_summary(self):
        invoice = make_invoice(
            "INV-B-1", PARTS_AG,
            raw_text="MwSt. inkl.\nCurrency: EUR",
            gross_total=119.0, tax_rate=0.19, net_total=119.0
        )

        result = RuleApplicationEngine(build_default_registry()).apply(invoice, context_for(invoice))

        assert len(result.proposed_corrections) == 2
        assert len(result.audit) == 3
        assert all(entry.step == AuditStep.APPLY for entry in result.audit)
        assert result.audit[-1].details == "Applied 2 memory rule(s) to invoice INV-B-1."

    def test_applying_twice_is_idempotent(self):
        """Test running the rules over their own output fires nothing new"""
        invoice = make_invoice(
            "INV-A-1", SUPPLIER_GMBH,
            raw_text="Leistungsdatum: 05.03.2024",
        )
        engine = RuleApplicationEngine(build_default_registry())

        first = engine.apply(invoice, context_for(invoice))
        rerun = invoice.model_copy(update={"fields": first.normalized})
        second = engine.apply(rerun, context_for(rerun))

        assert len(first.applied_memories) == 1
        assert second.applied_memories == []
