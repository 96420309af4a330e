"""
Repository implementations.
"""

from accueil.infrastructure.persistence.repositories.profile_repository import (
    ProfileRepository,
)
from accueil.infrastructure.persistence.repositories.wallet_repository import (
    WalletRepository,
)

__all__ = [
    "ProfileRepository",
    "WalletRepository",
]
