"""
Base domain exceptions.
"""


class AccueilException(Exception):
    """Base exception for all Accueil domain errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class EntityNotFoundError(AccueilException):
    """Raised when entity is not found in repository."""

    def __init__(self, entity_type: str, entity_id: str):
        message = f"{entity_type} with ID {entity_id} not found"
        super().__init__(message, code="ENTITY_NOT_FOUND")


class ValidationError(AccueilException):
    """Raised when entity or registration data validation fails."""

    def __init__(self, field: str, reason: str):
        self.field = field
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message, code="VALIDATION_ERROR")


class NetworkError(AccueilException):
    """
    Raised when a remote collaborator cannot be reached.

    Always transient: the caller may retry the same flow.
    """

    def __init__(self, message: str = "Network request failed"):
        super().__init__(message, code="NETWORK_ERROR")
