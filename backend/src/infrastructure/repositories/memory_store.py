"""Memory store repository for vendor and correction memories"""

import logging
from typing import Any, Optional

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.memory import CorrectionMemoryRecord, VendorMemoryRecord
from domain.memory.errors import DuplicateCorrectionMemoryError, MemoryStoreError
from domain.memory.models import CorrectionMemory, VendorMemory
from domain.memory.ports import MemoryStorePort
from .errors import store_errors

logger = logging.getLogger(__name__)


def _to_correction_memory(record: CorrectionMemoryRecord) -> CorrectionMemory:
    return CorrectionMemory(
        id=record.id,
        vendor=record.vendor,
        field=record.field,
        pattern=record.pattern or {},
        suggested_value=record.suggested_value,
        confidence=float(record.confidence),
    )


class MemoryStore(MemoryStorePort):
    """Repository for vendor_memory and correction_memory tables.

    Writes are flushed but not committed; the caller owns the transaction.
    `find_correction_memory(..., for_update=True)` issues SELECT ... FOR
    UPDATE so that a learner's read-modify-write holds the row until commit
    (ignored by SQLite).
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get_vendor_memories(self, vendor: str) -> list[VendorMemory]:
        query = select(VendorMemoryRecord).where(
            VendorMemoryRecord.vendor == vendor
        ).order_by(VendorMemoryRecord.id)

        with store_errors("get_vendor_memories"):
            records = self.db.execute(query).scalars().all()

        return [
            VendorMemory(id=record.id, vendor=record.vendor, key=record.key, value=record.value)
            for record in records
        ]

    def get_correction_memories(self, vendor: str) -> list[CorrectionMemory]:
        query = select(CorrectionMemoryRecord).where(
            CorrectionMemoryRecord.vendor == vendor
        ).order_by(CorrectionMemoryRecord.id)

        with store_errors("get_correction_memories"):
            records = self.db.execute(query).scalars().all()

        return [_to_correction_memory(record) for record in records]

    def find_correction_memory(
        self,
        vendor: str,
        field: str,
        for_update: bool = False
    ) -> Optional[CorrectionMemory]:
        query = select(CorrectionMemoryRecord).where(
            and_(
                CorrectionMemoryRecord.vendor == vendor,
                CorrectionMemoryRecord.field == field
            )
        )
        if for_update:
            query = query.with_for_update()

        with store_errors("find_correction_memory"):
            record = self.db.execute(query).scalar_one_or_none()

        return _to_correction_memory(record) if record else None

    def create_correction_memory(
        self,
        vendor: str,
        field: str,
        pattern: dict[str, Any],
        suggested_value: Any,
        confidence: float
    ) -> int:
        """Insert a correction memory inside a savepoint.

        A unique-constraint violation rolls back only the savepoint and is
        reported as DuplicateCorrectionMemoryError, leaving the surrounding
        transaction usable.
        """
        record = CorrectionMemoryRecord(
            vendor=vendor,
            field=field,
            pattern=pattern,
            suggested_value=suggested_value,
            confidence=round(confidence, 4),
        )

        try:
            with self.db.begin_nested():
                self.db.add(record)
                self.db.flush()
        except IntegrityError as e:
            logger.warning(f"Correction memory {vendor}.{field} already exists: {e.orig}")
            raise DuplicateCorrectionMemoryError(vendor, field) from e
        except SQLAlchemyError as e:
            logger.error(f"Database error during create_correction_memory: {e}")
            raise MemoryStoreError(f"create_correction_memory failed: {e}") from e

        logger.debug(f"Created correction memory {record.id} for {vendor}.{field}")
        return record.id

    def update_correction_memory_confidence(self, memory_id: int, confidence: float) -> None:
        with store_errors("update_correction_memory_confidence"):
            record = self.db.get(CorrectionMemoryRecord, memory_id)
            if record is None:
                raise MemoryStoreError(f"Correction memory {memory_id} not found")

            record.confidence = round(confidence, 4)
            self.db.flush()

    def list_correction_memories(self) -> list[CorrectionMemory]:
        """Return every correction memory ordered by vendor and field."""
        query = select(CorrectionMemoryRecord).order_by(
            CorrectionMemoryRecord.vendor,
            CorrectionMemoryRecord.field
        )

        with store_errors("list_correction_memories"):
            records = self.db.execute(query).scalars().all()

        return [_to_correction_memory(record) for record in records]

    def save_vendor_memory(self, vendor: str, key: str, value: Any) -> int:
        """Insert or replace the vendor memory for (vendor, key)."""
        query = select(VendorMemoryRecord).where(
            and_(VendorMemoryRecord.vendor == vendor, VendorMemoryRecord.key == key)
        )

        with store_errors("save_vendor_memory"):
            record = self.db.execute(query).scalar_one_or_none()
            if record is None:
                record = VendorMemoryRecord(vendor=vendor, key=key)
                self.db.add(record)
            record.value = value
            self.db.flush()

        return record.id
