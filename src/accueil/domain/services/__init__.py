"""
Domain services package.
"""

from accueil.domain.services.i_identity_provider import (
    AuthChangeCallback,
    AuthEvent,
    IIdentityProvider,
    Unsubscribe,
)
from accueil.domain.services.i_session_store import ISessionStore

__all__ = [
    "IIdentityProvider",
    "ISessionStore",
    "AuthEvent",
    "AuthChangeCallback",
    "Unsubscribe",
]
