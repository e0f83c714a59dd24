"""Repository ports for the invoice memory pipeline.

The engine only talks to these interfaces. SQLAlchemy implementations live in
`infrastructure.repositories`; tests substitute in-memory fakes.

All implementations must raise `MemoryStoreError` (or a subclass) when the
backing store is unavailable.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from .models import (
    AuditEntry,
    CorrectionMemory,
    HumanCorrection,
    Invoice,
    PurchaseOrder,
    VendorMemory,
)


class InvoiceRepositoryPort(ABC):
    """Read access to stored invoices."""

    @abstractmethod
    def get_invoice_by_id(self, invoice_id: str) -> Optional[Invoice]:
        """Return the invoice, or None if it does not exist."""
        pass

    @abstractmethod
    def find_invoices_by_vendor_and_number(self, vendor: str, invoice_number: str) -> Sequence[Invoice]:
        """Return all stored invoices with this vendor and invoice number.

        The result includes the invoice being processed, if stored.
        """
        pass


class PurchaseOrderRepositoryPort(ABC):

    @abstractmethod
    def get_purchase_orders_by_vendor(self, vendor: str) -> Sequence[PurchaseOrder]:
        pass


class MemoryStorePort(ABC):
    """Vendor and correction memories.

    Correction memories are unique per (vendor, field).
    """

    @abstractmethod
    def get_vendor_memories(self, vendor: str) -> Sequence[VendorMemory]:
        pass

    @abstractmethod
    def get_correction_memories(self, vendor: str) -> Sequence[CorrectionMemory]:
        pass

    @abstractmethod
    def find_correction_memory(
        self,
        vendor: str,
        field: str,
        for_update: bool = False
    ) -> Optional[CorrectionMemory]:
        """Look up the correction memory for (vendor, field).

        Args:
            vendor: Vendor name
            field: Field name
            for_update: Lock the row until the surrounding transaction ends

        Returns:
            The memory, or None if absent
        """
        pass

    @abstractmethod
    def create_correction_memory(
        self,
        vendor: str,
        field: str,
        pattern: dict[str, Any],
        suggested_value: Any,
        confidence: float
    ) -> int:
        """Create a correction memory and return its id.

        Raises:
            DuplicateCorrectionMemoryError: If (vendor, field) already exists
        """
        pass

    @abstractmethod
    def update_correction_memory_confidence(self, memory_id: int, confidence: float) -> None:
        pass


class HumanCorrectionRepositoryPort(ABC):

    @abstractmethod
    def get_human_correction_for_invoice(self, invoice_id: str) -> Optional[HumanCorrection]:
        """Return the (at most one) human correction for an invoice."""
        pass


class AuditSinkPort(ABC):
    """Durable, append-only audit log."""

    @abstractmethod
    def append_audit_entries(self, invoice_id: str, entries: Sequence[AuditEntry]) -> None:
        """Append entries in the given order.

        Raises:
            AuditPersistenceError: If the entries could not be written
        """
        pass
