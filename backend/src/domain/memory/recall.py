"""Recall stage: gather everything known about an invoice's vendor."""

import logging
from dataclasses import dataclass

from .models import AuditEntry, AuditStep, Invoice, MemoryContext
from .ports import InvoiceRepositoryPort, MemoryStorePort, PurchaseOrderRepositoryPort


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecallResult:
    context: MemoryContext
    audit: list[AuditEntry]


class MemoryRecall:
    """Builds the MemoryContext for an invoice.

    Besides vendor and correction memories this also loads the vendor's
    purchase orders and the invoices sharing the same invoice number, so that
    rule evaluation performs no I/O of its own.

    Store errors propagate. An empty context on failure would look exactly
    like a vendor without history and skew the decision stage.
    """

    def __init__(
        self,
        memory_store: MemoryStorePort,
        invoices: InvoiceRepositoryPort,
        purchase_orders: PurchaseOrderRepositoryPort
    ):
        self.memory_store = memory_store
        self.invoices = invoices
        self.purchase_orders = purchase_orders

    def recall(self, invoice: Invoice) -> RecallResult:
        vendor = invoice.vendor

        vendor_memories = tuple(self.memory_store.get_vendor_memories(vendor))
        correction_memories = tuple(self.memory_store.get_correction_memories(vendor))
        purchase_orders = tuple(self.purchase_orders.get_purchase_orders_by_vendor(vendor))
        same_number_invoices = tuple(
            self.invoices.find_invoices_by_vendor_and_number(vendor, invoice.fields.invoice_number)
        )

        context = MemoryContext(
            invoice_id=invoice.invoice_id,
            vendor=vendor,
            vendor_memories=vendor_memories,
            correction_memories=correction_memories,
            purchase_orders=purchase_orders,
            same_number_invoices=same_number_invoices,
        )

        details = (
            f"Recalled {len(vendor_memories)} vendor memories and "
            f"{len(correction_memories)} correction memories for vendor {vendor}"
            f" ({len(purchase_orders)} purchase orders, "
            f"{len(same_number_invoices)} invoices numbered {invoice.fields.invoice_number})"
        )
        logger.info(details, extra={"invoice_id": invoice.invoice_id, "vendor": vendor})

        return RecallResult(
            context=context,
            audit=[AuditEntry(step=AuditStep.RECALL, details=details)]
        )
