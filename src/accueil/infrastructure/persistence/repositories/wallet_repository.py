"""
Wallet repository implementation.
"""

import asyncio
from typing import Optional

from sqlalchemy import select

from accueil.domain.entities.wallet import Wallet
from accueil.domain.repositories.i_wallet_repository import IWalletRepository
from accueil.infrastructure.persistence.database import Database
from accueil.infrastructure.persistence.models import WalletModel
from accueil.infrastructure.persistence.repositories._errors import (
    translate_store_errors,
)


class WalletRepository(IWalletRepository):
    """
    SQLAlchemy implementation of the wallet repository.

    The unique index on user_id rejects a second wallet; the foreign
    key rejects a wallet for a profile that does not exist.
    """

    def __init__(self, database: Database, timeout: float = 10.0):
        """
        Initialize repository.

        Args:
            database: Connected database manager
            timeout: Per-operation timeout in seconds
        """
        self.database = database
        self.timeout = timeout

    async def find_wallet(self, user_id: str) -> Optional[Wallet]:
        """
        Get wallet by owning profile id.

        Args:
            user_id: Profile id

        Returns:
            Wallet entity if found, None otherwise
        """
        async with translate_store_errors("wallets", user_id, "find_wallet"):
            model = await asyncio.wait_for(
                self._fetch_by_user(user_id), timeout=self.timeout
            )

        return self._to_entity(model) if model else None

    async def _fetch_by_user(self, user_id: str) -> Optional[WalletModel]:
        """Fetch wallet row by owner."""
        async with self.database.session() as session:
            stmt = select(WalletModel).where(WalletModel.user_id == user_id)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def insert_wallet(self, wallet: Wallet) -> Wallet:
        """
        Insert new wallet.

        Args:
            wallet: Wallet entity to insert

        Returns:
            Inserted wallet entity
        """
        async with translate_store_errors("wallets", wallet.user_id, "insert_wallet"):
            model = await asyncio.wait_for(
                self._insert(wallet), timeout=self.timeout
            )

        return self._to_entity(model)

    async def _insert(self, wallet: Wallet) -> WalletModel:
        """Insert wallet row and commit."""
        model = WalletModel(
            id=wallet.id,
            user_id=wallet.user_id,
            balance=wallet.balance,
            created_at=wallet.created_at,
        )

        async with self.database.session() as session:
            session.add(model)
            await session.flush()

        return model

    def _to_entity(self, model: WalletModel) -> Wallet:
        """
        Convert WalletModel to Wallet entity.

        Args:
            model: SQLAlchemy model

        Returns:
            Wallet domain entity
        """
        return Wallet(
            id=model.id,
            user_id=model.user_id,
            balance=model.balance,
            created_at=model.created_at,
        )
