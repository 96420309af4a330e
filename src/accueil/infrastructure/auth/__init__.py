"""
Identity provider infrastructure package.
"""

from accueil.infrastructure.auth.session_store import (
    FileSessionStore,
    InMemorySessionStore,
)
from accueil.infrastructure.auth.supabase_identity_provider import (
    SupabaseIdentityProvider,
    identity_from_user,
)

__all__ = [
    "SupabaseIdentityProvider",
    "FileSessionStore",
    "InMemorySessionStore",
    "identity_from_user",
]
