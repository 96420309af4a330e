"""
Domain exceptions package.
"""

# Auth exceptions
from accueil.domain.exceptions.auth import (
    AuthenticationError,
    EmailInUseError,
    EmailUnconfirmedError,
    IdentityProviderUnavailableError,
    InvalidCredentialsError,
)

# Base exceptions
from accueil.domain.exceptions.base import (
    AccueilException,
    EntityNotFoundError,
    NetworkError,
    ValidationError,
)

# Provisioning exceptions
from accueil.domain.exceptions.provisioning import (
    InvalidStateTransitionError,
    ProvisioningStateError,
)

# Record store exceptions
from accueil.domain.exceptions.store import (
    ConstraintViolationError,
    DuplicateKeyError,
    RecordStoreError,
    RecordStoreUnavailableError,
)

__all__ = [
    # Base
    "AccueilException",
    "EntityNotFoundError",
    "NetworkError",
    "ValidationError",
    # Auth
    "AuthenticationError",
    "InvalidCredentialsError",
    "EmailInUseError",
    "EmailUnconfirmedError",
    "IdentityProviderUnavailableError",
    # Record store
    "RecordStoreError",
    "DuplicateKeyError",
    "ConstraintViolationError",
    "RecordStoreUnavailableError",
    # Provisioning
    "ProvisioningStateError",
    "InvalidStateTransitionError",
]
