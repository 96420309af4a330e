"""Domain repository interfaces."""

from accueil.domain.repositories.i_profile_repository import IProfileRepository
from accueil.domain.repositories.i_wallet_repository import IWalletRepository

__all__ = [
    "IProfileRepository",
    "IWalletRepository",
]
