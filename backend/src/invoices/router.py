"""Invoice processing API endpoints."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_memory_engine
from domain.memory import InvoiceValidationError, MemoryEngine, MemoryStoreError
from infrastructure.repositories import AuditRepository
from observability.context import bind_invoice
from observability.metrics import record_invoice_processed
from .schemas import AuditEntrySchema, AuditTrailResponse, ProcessInvoiceResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("/{invoice_id}/process", response_model=ProcessInvoiceResponse)
def process_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    engine: MemoryEngine = Depends(get_memory_engine)
):
    """Run a stored invoice through recall, rule application, decision and learning.

    Memory updates and the audit trail are committed together at the end of
    the request. A failed audit append is reported as `auditPersisted=false`
    while the memory updates are still committed.

    Args:
        invoice_id: Invoice identifier
        db: Database session
        engine: Memory engine bound to the session

    Returns:
        ProcessInvoiceResponse

    Raises:
        HTTPException: 404 if the invoice does not exist, 422 if the stored
            invoice is malformed, 503 if the memory store is unavailable
    """
    start_time = time.time()

    with bind_invoice(invoice_id):
        try:
            output = engine.process_invoice(invoice_id)
            if output is not None:
                db.commit()
        except InvoiceValidationError as e:
            db.rollback()
            logger.warning(f"Stored data for invoice {invoice_id} is invalid: {e}")
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"message": str(e), "errors": e.errors}
            )
        except (MemoryStoreError, SQLAlchemyError) as e:
            db.rollback()
            logger.error(f"Memory store unavailable while processing invoice {invoice_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Memory store unavailable"
            )

    if output is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Invoice {invoice_id} not found"
        )

    record_invoice_processed(output, time.time() - start_time)

    return ProcessInvoiceResponse.model_validate(output.to_dict())


@router.get("/{invoice_id}/audit", response_model=AuditTrailResponse)
def get_audit_trail(invoice_id: str, db: Session = Depends(get_db)):
    """Get the persisted audit trail of an invoice.

    Returns an empty list for invoices that were never processed.
    """
    try:
        records = AuditRepository(db).get_audit_trail(invoice_id)
    except MemoryStoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Memory store unavailable"
        )

    return AuditTrailResponse(
        invoice_id=invoice_id,
        entries=[
            AuditEntrySchema(step=r.step, timestamp=r.created_at, details=r.details)
            for r in records
        ]
    )
