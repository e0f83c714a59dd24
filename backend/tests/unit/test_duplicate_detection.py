"""Unit tests for duplicate invoice detection

Tests cover:
- 2-day inclusive window (both directions) and 3-day miss
- Mixed German date formats
- Self-exclusion and vendor/number matching
- Snapshot semantics (candidates come from recall)
"""

from domain.memory import DuplicateFlagged, MemoryContext, NormalizedInvoiceFields
from domain.memory.rules import DuplicateDetectionRule
from fixtures.in_memory_repositories import InMemoryRepositories, make_invoice


def detect(invoice, *others, window_days=2):
    context = MemoryContext(
        invoice_id=invoice.invoice_id,
        vendor=invoice.vendor,
        same_number_invoices=(invoice, *others),
    )
    fields = NormalizedInvoiceFields.from_fields(invoice.fields)
    outcome = DuplicateDetectionRule(window_days=window_days).apply(fields, invoice.raw_text, context)
    return fields, outcome


class TestDuplicateWindow:
    """Test the date window of duplicate detection"""

    def test_two_days_apart_flags_both(self):
        first = make_invoice("INV-1", "Parts AG", invoice_number="P-1", invoice_date="01-03-2024")
        second = make_invoice("INV-2", "Parts AG", invoice_number="P-1", invoice_date="03-03-2024")

        first_fields, first_outcome = detect(first, second)
        second_fields, second_outcome = detect(second, first)

        assert first_fields.duplicate is True
        assert second_fields.duplicate is True
        assert isinstance(first_outcome.memory, DuplicateFlagged)
        assert first_outcome.memory.duplicate_of == ("INV-2",)
        assert second_outcome.memory.duplicate_of == ("INV-1",)

    def test_three_days_apart_flags_neither(self):
        first = make_invoice("INV-1", "Parts AG", invoice_number="P-1", invoice_date="01-03-2024")
        second = make_invoice("INV-2", "Parts AG", invoice_number="P-1", invoice_date="04-03-2024")

        assert detect(first, second)[1] is None
        assert detect(second, first)[1] is None

    def test_mixed_date_formats(self):
        first = make_invoice("INV-1", "Supplier GmbH", invoice_number="A-1", invoice_date="25.01.2024")
        second = make_invoice("INV-2", "Supplier GmbH", invoice_number="A-1", invoice_date="26-01-2024")

        fields, outcome = detect(first, second)

        assert fields.duplicate is True
        assert outcome.description == "Flagged as duplicate invoice based on same vendor + invoiceNumber + close dates."

    def test_window_is_configurable(self):
        first = make_invoice("INV-1", "Parts AG", invoice_number="P-1", invoice_date="01-03-2024")
        second = make_invoice("INV-2", "Parts AG", invoice_number="P-1", invoice_date="06-03-2024")

        assert detect(first, second, window_days=5)[1] is not None
        assert detect(first, second, window_days=4)[1] is None


class TestDuplicateMatching:

    def test_invoice_is_not_its_own_duplicate(self):
        invoice = make_invoice("INV-1", "Parts AG", invoice_number="P-1")

        fields, outcome = detect(invoice)

        assert outcome is None
        assert fields.duplicate is False

    def test_other_vendor_is_ignored(self):
        invoice = make_invoice("INV-1", "Parts AG", invoice_number="X-1")
        other = make_invoice("INV-2", "Freight & Co", invoice_number="X-1")

        assert detect(invoice, other)[1] is None

    def test_unparseable_dates_never_match(self):
        invoice = make_invoice("INV-1", "Parts AG", invoice_number="P-1", invoice_date="unknown")
        other = make_invoice("INV-2", "Parts AG", invoice_number="P-1", invoice_date="unknown")

        assert detect(invoice, other)[1] is None


class TestDuplicatePipeline:
    """Test duplicate detection through recall and rule application"""

    def test_pipeline_flags_duplicate_and_boosts_confidence(self, repos: InMemoryRepositories):
        repos.invoices.add(
            make_invoice("INV-A-003", "Supplier GmbH", confidence=0.69, invoice_number="INV-2024-003", invoice_date="25.01.2024"),
            make_invoice("INV-A-004", "Supplier GmbH", confidence=0.69, invoice_number="INV-2024-003", invoice_date="26.01.2024"),
        )

        output = repos.engine().process_invoice("INV-A-004")

        assert output.normalized_invoice.duplicate is True
        assert output.confidence_score == 0.74
        assert output.requires_human_review is True
