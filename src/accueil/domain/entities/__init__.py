"""Domain entities."""

from accueil.domain.entities.identity import Identity
from accueil.domain.entities.profile import Profile
from accueil.domain.entities.wallet import OPENING_BALANCE, Wallet

__all__ = [
    "Identity",
    "Profile",
    "Wallet",
    "OPENING_BALANCE",
]
