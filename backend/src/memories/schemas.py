"""Pydantic schemas for memory endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import Field

from invoices.schemas import CamelModel


class VendorMemorySchema(CamelModel):
    id: Optional[int]
    key: str
    value: Any = None


class CorrectionMemorySchema(CamelModel):
    id: Optional[int]
    field: str
    pattern: Dict[str, Any]
    suggested_value: Any = None
    confidence: float = Field(ge=0.0, le=1.0)


class VendorMemoriesResponse(CamelModel):
    """Everything the engine has learned about one vendor."""
    vendor: str
    vendor_memories: List[VendorMemorySchema]
    correction_memories: List[CorrectionMemorySchema]
