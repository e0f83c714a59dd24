"""SQLAlchemy implementations of the invoice memory ports"""

from .audit_repository import AuditRepository
from .errors import store_errors
from .human_correction_repository import HumanCorrectionRepository
from .invoice_repository import InvoiceRepository, PurchaseOrderRepository
from .memory_store import MemoryStore

__all__ = [
    "AuditRepository",
    "HumanCorrectionRepository",
    "InvoiceRepository",
    "PurchaseOrderRepository",
    "MemoryStore",
    "store_errors",
]
