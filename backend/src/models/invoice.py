"""Invoice and purchase order SQLAlchemy models"""

from sqlalchemy import Column, DateTime, Index, Text
from sqlalchemy.sql import func

from .base import Base, PortableJSONB


class InvoiceRecord(Base):
    """Pre-extracted invoice document.

    `data` holds the full camelCase document (invoiceId, vendor, confidence,
    rawText, fields). Vendor and invoice number are copied into columns for
    duplicate lookups.
    """
    __tablename__ = "invoice"
    __table_args__ = (
        Index("ix_invoice_vendor_invoice_number", "vendor", "invoice_number"),
    )

    invoice_id = Column(Text, primary_key=True)
    vendor = Column(Text, nullable=False)
    invoice_number = Column(Text, nullable=False)
    data = Column(PortableJSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<InvoiceRecord {self.invoice_id} vendor={self.vendor!r}>"


class PurchaseOrderRecord(Base):
    """Purchase order document used for PO-number suggestion"""
    __tablename__ = "purchase_order"
    __table_args__ = (
        Index("ix_purchase_order_vendor", "vendor"),
    )

    po_number = Column(Text, primary_key=True)
    vendor = Column(Text, nullable=False)
    data = Column(PortableJSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
