"""Translation of SQLAlchemy failures into memory pipeline errors"""

import logging
from contextlib import contextmanager
from typing import Iterator, Type

from sqlalchemy.exc import SQLAlchemyError

from domain.memory.errors import MemoryStoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str, error_class: Type[MemoryStoreError] = MemoryStoreError) -> Iterator[None]:
    """Re-raise database errors raised inside the block as `error_class`.

    Usage:
        with store_errors("get_vendor_memories"):
            rows = self.db.execute(query).scalars().all()
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Database error during {operation}: {e}")
        raise error_class(f"{operation} failed: {e}") from e
