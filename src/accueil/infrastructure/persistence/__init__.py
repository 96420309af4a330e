"""
Infrastructure persistence package.
"""

from accueil.infrastructure.persistence.database import Database
from accueil.infrastructure.persistence.models import (
    Base,
    ProfileModel,
    WalletModel,
)

__all__ = [
    "Database",
    "Base",
    "ProfileModel",
    "WalletModel",
]
