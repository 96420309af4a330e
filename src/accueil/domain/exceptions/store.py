"""
Record store exceptions.

Raised by profile and wallet repositories. Duplicate-key rejection is
the idempotency guard for provisioning, so it is kept distinct from
every other integrity failure.
"""

from accueil.domain.exceptions.base import AccueilException, NetworkError


class RecordStoreError(AccueilException):
    """Base exception for record store operations."""


class DuplicateKeyError(RecordStoreError):
    """Raised when an insert hits an existing primary or unique key."""

    def __init__(self, table: str, key: str):
        self.table = table
        self.key = key
        super().__init__(
            f"Row in {table} with key {key} already exists",
            code="DUPLICATE_KEY",
        )


class ConstraintViolationError(RecordStoreError):
    """Raised when an insert violates a constraint other than a key."""

    def __init__(self, table: str, reason: str):
        self.table = table
        super().__init__(
            f"Constraint violated on {table}: {reason}",
            code="CONSTRAINT_VIOLATION",
        )


class RecordStoreUnavailableError(NetworkError, RecordStoreError):
    """Raised when the record store cannot be reached or times out."""

    def __init__(self, operation: str, reason: str = "unreachable"):
        self.operation = operation
        NetworkError.__init__(self, f"Record store {operation} failed: {reason}")
