"""Audit trail repository (append-only)"""

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.audit_trail import AuditTrailRecord
from domain.memory.errors import AuditPersistenceError
from domain.memory.models import AuditEntry
from domain.memory.ports import AuditSinkPort
from .errors import store_errors

logger = logging.getLogger(__name__)


class AuditRepository(AuditSinkPort):
    """Persists pipeline audit trails to the audit_trail table.

    Each append runs in a savepoint: if it fails, none of the invoice's
    entries are written and the rest of the transaction (learning updates)
    is unaffected.
    """

    def __init__(self, db: Session):
        self.db = db

    def append_audit_entries(self, invoice_id: str, entries: Sequence[AuditEntry]) -> None:
        with store_errors("append_audit_entries", AuditPersistenceError):
            with self.db.begin_nested():
                self.db.add_all([
                    AuditTrailRecord(
                        invoice_id=invoice_id,
                        step=entry.step.value,
                        details=entry.details,
                        created_at=entry.timestamp,
                    )
                    for entry in entries
                ])
                self.db.flush()

        logger.debug(f"Appended {len(entries)} audit entries for invoice {invoice_id}")

    def get_audit_trail(self, invoice_id: str) -> list[AuditTrailRecord]:
        """Get the persisted audit entries of an invoice in insertion order.

        Args:
            invoice_id: Invoice identifier

        Returns:
            List of AuditTrailRecord objects (all runs, oldest first)
        """
        query = select(AuditTrailRecord).where(
            AuditTrailRecord.invoice_id == invoice_id
        ).order_by(AuditTrailRecord.id)

        with store_errors("get_audit_trail"):
            return list(self.db.execute(query).scalars().all())
