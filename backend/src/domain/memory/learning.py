"""Learning stage: reinforce or decay correction memories from human review.

For every field-level correction in the invoice's human review record:

- no memory for (vendor, field) yet: create one with the approved (0.7) or
  rejected (0.3) initial confidence
- memory exists: add +delta on approval, -delta on rejection, clamped to
  [0, 1]

The read-modify-write of a memory is serialized per (vendor, field): an
in-process lock guards it, the store is asked for a row lock, and a
concurrent create is resolved by re-reading the winner's row and updating it.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Optional

from .errors import DuplicateCorrectionMemoryError
from .models import AuditEntry, AuditStep, EngineConfig, FieldCorrection, HumanCorrection, Invoice
from .ports import HumanCorrectionRepositoryPort, MemoryStorePort

logger = logging.getLogger(__name__)


class KeyedLock:
    """One re-entrant lock per key, created on demand.

    A key's lock is dropped once its last holder or waiter leaves, so the
    table only holds keys that are currently in use.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._locks: dict[tuple, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, *key) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.RLock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


# Shared by all learners in the process so that engines built per request
# still serialize updates to the same (vendor, field).
correction_memory_locks = KeyedLock()


def adjust_confidence(current: float, delta: float) -> float:
    """Add delta to a confidence and clamp the result to [0, 1].

    Decimal arithmetic keeps repeated +/-0.1 steps exact (0.7 + 0.1 == 0.8).
    """
    value = Decimal(str(current)) + Decimal(str(delta))
    value = max(Decimal("0"), min(Decimal("1"), value))
    return float(value)


@dataclass(frozen=True)
class LearningResult:
    memory_updates: list[str]
    audit: list[AuditEntry]


class ReinforcementLearner:
    """Turns a human correction record into correction-memory updates.

    This is the only pipeline stage that writes to the memory store.
    """

    def __init__(
        self,
        memory_store: MemoryStorePort,
        human_corrections: HumanCorrectionRepositoryPort,
        config: Optional[EngineConfig] = None,
        locks: Optional[KeyedLock] = None
    ):
        self.memory_store = memory_store
        self.human_corrections = human_corrections
        self.config = config or EngineConfig()
        self.locks = locks if locks is not None else correction_memory_locks

    def learn(self, invoice: Invoice) -> LearningResult:
        record = self.human_corrections.get_human_correction_for_invoice(invoice.invoice_id)

        if record is None:
            return LearningResult(
                memory_updates=[],
                audit=[AuditEntry(
                    step=AuditStep.LEARN,
                    details=f"No human corrections for invoice {invoice.invoice_id}; no memory updates."
                )]
            )

        memory_updates = [
            self._learn_correction(invoice.vendor, correction, record)
            for correction in record.corrections
        ]

        logger.info(
            f"Learned from {len(record.corrections)} human correction(s) for invoice "
            f"{invoice.invoice_id} ({record.final_decision.value})",
            extra={"invoice_id": invoice.invoice_id, "vendor": invoice.vendor}
        )

        return LearningResult(
            memory_updates=memory_updates,
            audit=[AuditEntry(
                step=AuditStep.LEARN,
                details=f"Processed {len(record.corrections)} human corrections for invoice {invoice.invoice_id}."
            )]
        )

    def _learn_correction(self, vendor: str, correction: FieldCorrection, record: HumanCorrection) -> str:
        """Create or adjust the memory for one corrected field. Returns the update message."""
        with self.locks.hold(vendor, correction.field):
            existing = self.memory_store.find_correction_memory(vendor, correction.field, for_update=True)

            if existing is None:
                confidence = (
                    self.config.approved_initial_confidence if record.approved
                    else self.config.rejected_initial_confidence
                )
                try:
                    self.memory_store.create_correction_memory(
                        vendor=vendor,
                        field=correction.field,
                        pattern={"trigger": "from_human_reason", "reason": correction.reason},
                        suggested_value={"to": correction.to_value},
                        confidence=confidence,
                    )
                    return f"Created new correction memory for {vendor}.{correction.field} with confidence {confidence:.2f}."
                except DuplicateCorrectionMemoryError:
                    logger.warning(
                        f"Correction memory {vendor}.{correction.field} was created concurrently; updating instead"
                    )
                    existing = self.memory_store.find_correction_memory(vendor, correction.field, for_update=True)
                    if existing is None:
                        raise

            delta = self.config.reinforcement_delta if record.approved else -self.config.reinforcement_delta
            new_confidence = adjust_confidence(existing.confidence, delta)
            self.memory_store.update_correction_memory_confidence(existing.id, new_confidence)

            return (
                f"Updated correction memory {existing.id} for {vendor}.{correction.field} "
                f"to confidence {new_confidence:.2f}."
            )
