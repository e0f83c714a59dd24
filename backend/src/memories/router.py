"""Memory inspection API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from domain.memory import MemoryStoreError
from infrastructure.repositories import MemoryStore
from .schemas import CorrectionMemorySchema, VendorMemoriesResponse, VendorMemorySchema

router = APIRouter(prefix="/memories", tags=["memories"])


@router.get("/{vendor}", response_model=VendorMemoriesResponse)
def get_vendor_memories(vendor: str, db: Session = Depends(get_db)):
    """Get the vendor and correction memories recorded for a vendor.

    Unknown vendors return empty lists.
    """
    store = MemoryStore(db)
    try:
        vendor_memories = store.get_vendor_memories(vendor)
        correction_memories = store.get_correction_memories(vendor)
    except MemoryStoreError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Memory store unavailable"
        )

    return VendorMemoriesResponse(
        vendor=vendor,
        vendor_memories=[
            VendorMemorySchema(id=m.id, key=m.key, value=m.value) for m in vendor_memories
        ],
        correction_memories=[
            CorrectionMemorySchema(
                id=m.id,
                field=m.field,
                pattern=m.pattern,
                suggested_value=m.suggested_value,
                confidence=m.confidence,
            )
            for m in correction_memories
        ]
    )
