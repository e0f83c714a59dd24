"""SQLAlchemy Models for the invoice memory store"""

from .base import Base, PortableJSONB
from .invoice import InvoiceRecord, PurchaseOrderRecord
from .memory import VendorMemoryRecord, CorrectionMemoryRecord
from .human_correction import HumanCorrectionRecord
from .audit_trail import AuditTrailRecord

__all__ = [
    "Base",
    "PortableJSONB",
    "InvoiceRecord",
    "PurchaseOrderRecord",
    "VendorMemoryRecord",
    "CorrectionMemoryRecord",
    "HumanCorrectionRecord",
    "AuditTrailRecord",
]
