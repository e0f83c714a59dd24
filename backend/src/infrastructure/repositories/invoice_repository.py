"""Invoice and purchase order repositories for database operations"""

from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select, and_
from sqlalchemy.orm import Session

from models.invoice import InvoiceRecord, PurchaseOrderRecord
from domain.memory.errors import InvoiceValidationError
from domain.memory.models import Invoice, PurchaseOrder
from domain.memory.ports import InvoiceRepositoryPort, PurchaseOrderRepositoryPort
from .errors import store_errors


def _parse_invoice(record: InvoiceRecord) -> Invoice:
    try:
        return Invoice.model_validate(record.data)
    except ValidationError as e:
        raise InvoiceValidationError(record.invoice_id, e.errors(include_url=False, include_context=False)) from e


def _parse_purchase_order(record: PurchaseOrderRecord) -> PurchaseOrder:
    try:
        return PurchaseOrder.model_validate(record.data)
    except ValidationError as e:
        raise InvoiceValidationError(
            f"purchase_order:{record.po_number}",
            e.errors(include_url=False, include_context=False)
        ) from e


class InvoiceRepository(InvoiceRepositoryPort):
    """Repository for invoice database operations.

    Stored documents are parsed into `Invoice` models on read; a document
    that does not fit the model raises InvoiceValidationError.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_invoice_by_id(self, invoice_id: str) -> Optional[Invoice]:
        with store_errors("get_invoice_by_id"):
            record = self.db.get(InvoiceRecord, invoice_id)

        if record is None:
            return None
        return _parse_invoice(record)

    def find_invoices_by_vendor_and_number(self, vendor: str, invoice_number: str) -> list[Invoice]:
        query = select(InvoiceRecord).where(
            and_(
                InvoiceRecord.vendor == vendor,
                InvoiceRecord.invoice_number == invoice_number
            )
        ).order_by(InvoiceRecord.invoice_id)

        with store_errors("find_invoices_by_vendor_and_number"):
            records = self.db.execute(query).scalars().all()

        return [_parse_invoice(record) for record in records]

    def save_invoice(self, invoice: Invoice) -> InvoiceRecord:
        """Insert or replace a stored invoice document.

        Args:
            invoice: Invoice to store

        Returns:
            Persisted InvoiceRecord
        """
        with store_errors("save_invoice"):
            record = self.db.get(InvoiceRecord, invoice.invoice_id)
            if record is None:
                record = InvoiceRecord(invoice_id=invoice.invoice_id)
                self.db.add(record)

            record.vendor = invoice.vendor
            record.invoice_number = invoice.fields.invoice_number
            record.data = invoice.model_dump(by_alias=True, mode="json")
            self.db.flush()

        return record


class PurchaseOrderRepository(PurchaseOrderRepositoryPort):
    """Repository for purchase_order database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_purchase_orders_by_vendor(self, vendor: str) -> list[PurchaseOrder]:
        query = select(PurchaseOrderRecord).where(
            PurchaseOrderRecord.vendor == vendor
        ).order_by(PurchaseOrderRecord.po_number)

        with store_errors("get_purchase_orders_by_vendor"):
            records = self.db.execute(query).scalars().all()

        return [_parse_purchase_order(record) for record in records]

    def save_purchase_order(self, purchase_order: PurchaseOrder) -> PurchaseOrderRecord:
        with store_errors("save_purchase_order"):
            record = self.db.get(PurchaseOrderRecord, purchase_order.po_number)
            if record is None:
                record = PurchaseOrderRecord(po_number=purchase_order.po_number)
                self.db.add(record)

            record.vendor = purchase_order.vendor
            record.data = purchase_order.model_dump(by_alias=True, mode="json")
            self.db.flush()

        return record
