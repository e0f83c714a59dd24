"""Exceptions raised by the invoice memory pipeline."""


class MemoryEngineError(Exception):
    """Base class for pipeline errors."""
    pass


class MemoryStoreError(MemoryEngineError):
    """A repository or the memory store could not be reached.

    Fatal for the current invocation. The pipeline does not retry.
    """
    pass


class AuditPersistenceError(MemoryStoreError):
    """The audit trail could not be appended to the audit sink."""
    pass


class DuplicateCorrectionMemoryError(MemoryStoreError):
    """A correction memory for the (vendor, field) pair already exists.

    Raised by `create_correction_memory` when a concurrent invocation
    created the row first.
    """

    def __init__(self, vendor: str, field: str):
        super().__init__(f"Correction memory already exists for {vendor}.{field}")
        self.vendor = vendor
        self.field = field


class InvoiceValidationError(MemoryEngineError):
    """A stored invoice or purchase order does not match its expected shape."""

    def __init__(self, document_id: str, errors: list):
        super().__init__(f"Invalid document {document_id}: {len(errors)} validation error(s)")
        self.document_id = document_id
        self.errors = errors
