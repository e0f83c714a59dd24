"""HumanCorrection SQLAlchemy model"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text
from sqlalchemy.sql import func

from .base import Base, PortableJSONB


class HumanCorrectionRecord(Base):
    """Outcome of the external human review of one invoice.

    At most one record per invoice. `corrections` is the ordered list of
    {field, from, to, reason} objects.
    """
    __tablename__ = "human_correction"
    __table_args__ = (
        CheckConstraint("final_decision IN ('approved', 'rejected')", name="ck_human_correction_final_decision"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Text, nullable=False, unique=True)
    vendor = Column(Text, nullable=False)
    corrections = Column(PortableJSONB, nullable=False)
    final_decision = Column(Text, nullable=False)  # approved, rejected
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
