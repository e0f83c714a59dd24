"""AuditTrail SQLAlchemy model"""

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, Text

from .base import Base


class AuditTrailRecord(Base):
    """Append-only pipeline audit entry.

    Entries are never updated or deleted. `id` preserves insertion order
    within an invoice's trail.
    """
    __tablename__ = "audit_trail"
    __table_args__ = (
        Index("ix_audit_trail_invoice_id", "invoice_id"),
        CheckConstraint("step IN ('recall', 'apply', 'decide', 'learn')", name="ck_audit_trail_step"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Text, nullable=False)
    step = Column(Text, nullable=False)  # recall, apply, decide, learn
    details = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
