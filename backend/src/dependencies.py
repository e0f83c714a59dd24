"""FastAPI dependencies wiring the memory engine to the database"""

from fastapi import Depends
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from domain.memory import MemoryEngine
from infrastructure.repositories import (
    AuditRepository,
    HumanCorrectionRepository,
    InvoiceRepository,
    MemoryStore,
    PurchaseOrderRepository,
)


def build_memory_engine(db: Session) -> MemoryEngine:
    """Create a MemoryEngine whose repositories share one session.

    Args:
        db: SQLAlchemy session; the caller commits or rolls back

    Returns:
        MemoryEngine configured from application settings
    """
    return MemoryEngine(
        invoices=InvoiceRepository(db),
        purchase_orders=PurchaseOrderRepository(db),
        memory_store=MemoryStore(db),
        human_corrections=HumanCorrectionRepository(db),
        audit_sink=AuditRepository(db),
        config=get_settings().engine_config(),
    )


def get_memory_engine(db: Session = Depends(get_db)) -> MemoryEngine:
    """Dependency for FastAPI endpoints.

    Usage:
        @router.post("/invoices/{invoice_id}/process")
        def process(invoice_id: str, engine: MemoryEngine = Depends(get_memory_engine)):
            return engine.process_invoice(invoice_id)
    """
    return build_memory_engine(db)
