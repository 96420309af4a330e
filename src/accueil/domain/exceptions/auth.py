"""
Authentication domain exceptions.
"""

from accueil.domain.exceptions.base import AccueilException, NetworkError


class AuthenticationError(AccueilException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_ERROR",
    ):
        super().__init__(message, code=code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password are rejected by the identity provider."""

    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class EmailInUseError(AuthenticationError):
    """Raised when signing up with an email that is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(
            f"An account with email {email} already exists",
            code="EMAIL_IN_USE",
        )


class EmailUnconfirmedError(AuthenticationError):
    """Raised when signing in before the email address is confirmed."""

    def __init__(self):
        super().__init__(
            "Please check your email and click the confirmation link",
            code="EMAIL_UNCONFIRMED",
        )


class IdentityProviderUnavailableError(NetworkError):
    """Raised when the identity provider cannot be reached."""

    def __init__(self, operation: str, reason: str = "unreachable"):
        self.operation = operation
        super().__init__(f"Identity provider {operation} failed: {reason}")
