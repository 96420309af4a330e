"""
Wallet repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from accueil.domain.entities.wallet import Wallet


class IWalletRepository(ABC):
    """Interface for wallet persistence operations."""

    @abstractmethod
    async def find_wallet(self, user_id: str) -> Optional[Wallet]:
        """
        Get wallet by owning profile id.

        Args:
            user_id: Profile id owning the wallet

        Returns:
            Wallet entity if found, None if no row exists

        Raises:
            RecordStoreUnavailableError: If the lookup itself fails
        """

    @abstractmethod
    async def insert_wallet(self, wallet: Wallet) -> Wallet:
        """
        Insert a new wallet.

        Args:
            wallet: Wallet entity to insert

        Returns:
            Inserted wallet entity

        Raises:
            DuplicateKeyError: If the user already has a wallet
            ConstraintViolationError: If the owning profile does not exist
            RecordStoreUnavailableError: If the store cannot be reached
        """
