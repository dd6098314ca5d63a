"""
Core Exceptions

Custom exceptions for the OpsDesk reports service.
"""


class DocumentStoreError(Exception):
    """
    Raised when a read, write or delete against the document store fails.

    Wraps backend-specific errors (Firestore, network) so services only
    need to handle one type. Services catch it at the call site and turn
    it into a user notification.
    """

    def __init__(self, message: str = "Document store request failed", path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class RecordNotFoundError(Exception):
    """Raised when a client entry id does not exist in the report."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        self.message = f"Client entry not found: {record_id}"
        super().__init__(self.message)


class UnknownFieldError(Exception):
    """Raised when a field name is not part of the header or client schema."""

    def __init__(self, field: str):
        self.field = field
        self.message = f"Unknown field: {field}"
        super().__init__(self.message)


class SectionNotFoundError(Exception):
    """Raised when a form section name is not one the report form has."""

    def __init__(self, section: str):
        self.section = section
        self.message = f"Unknown form section: {section}"
        super().__init__(self.message)
