"""Human correction repository for database operations"""

from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from models.human_correction import HumanCorrectionRecord
from domain.memory.errors import InvoiceValidationError
from domain.memory.models import HumanCorrection
from domain.memory.ports import HumanCorrectionRepositoryPort
from .errors import store_errors


class HumanCorrectionRepository(HumanCorrectionRepositoryPort):
    """Repository for human_correction database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_human_correction_for_invoice(self, invoice_id: str) -> Optional[HumanCorrection]:
        query = select(HumanCorrectionRecord).where(HumanCorrectionRecord.invoice_id == invoice_id)

        with store_errors("get_human_correction_for_invoice"):
            record = self.db.execute(query).scalar_one_or_none()

        if record is None:
            return None

        try:
            return HumanCorrection.model_validate({
                "invoiceId": record.invoice_id,
                "vendor": record.vendor,
                "corrections": record.corrections,
                "finalDecision": record.final_decision,
            })
        except ValidationError as e:
            raise InvoiceValidationError(f"human_correction:{invoice_id}", e.errors(include_url=False, include_context=False)) from e

    def save_human_correction(self, correction: HumanCorrection) -> HumanCorrectionRecord:
        """Insert or replace the human correction record of an invoice.

        Args:
            correction: Human review outcome

        Returns:
            Persisted HumanCorrectionRecord
        """
        query = select(HumanCorrectionRecord).where(
            HumanCorrectionRecord.invoice_id == correction.invoice_id
        )

        with store_errors("save_human_correction"):
            record = self.db.execute(query).scalar_one_or_none()
            if record is None:
                record = HumanCorrectionRecord(invoice_id=correction.invoice_id)
                self.db.add(record)

            record.vendor = correction.vendor
            record.corrections = [
                c.model_dump(by_alias=True, mode="json") for c in correction.corrections
            ]
            record.final_decision = correction.final_decision.value
            self.db.flush()

        return record
