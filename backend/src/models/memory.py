"""Vendor and correction memory SQLAlchemy models"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.sql import func

from .base import Base, PortableJSONB


class VendorMemoryRecord(Base):
    """Qualitative fact about a vendor's document conventions (not scored)"""
    __tablename__ = "vendor_memory"
    __table_args__ = (
        UniqueConstraint("vendor", "key", name="uq_vendor_memory_vendor_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor = Column(Text, nullable=False)
    key = Column(Text, nullable=False)
    value = Column(PortableJSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CorrectionMemoryRecord(Base):
    """Learned correction for a (vendor, field) pair.

    Exactly one row per (vendor, field). `confidence` is reinforced or
    decayed by human review and always stays within [0, 1].
    """
    __tablename__ = "correction_memory"
    __table_args__ = (
        UniqueConstraint("vendor", "field", name="uq_correction_memory_vendor_field"),
        CheckConstraint("confidence >= 0 AND confidence <= 1", name="ck_correction_memory_confidence"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor = Column(Text, nullable=False)
    field = Column(Text, nullable=False)
    pattern = Column(PortableJSONB, nullable=False)
    suggested_value = Column(PortableJSONB, nullable=True)
    confidence = Column(Numeric(5, 4), nullable=False)  # 0.0-1.0
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
