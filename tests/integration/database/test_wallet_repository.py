"""
Integration tests for WalletRepository.
"""

from decimal import Decimal

import pytest

from accueil.domain.entities.profile import Profile
from accueil.domain.entities.wallet import Wallet
from accueil.domain.exceptions import ConstraintViolationError, DuplicateKeyError
from accueil.infrastructure.persistence.repositories.profile_repository import (
    ProfileRepository,
)
from accueil.infrastructure.persistence.repositories.wallet_repository import (
    WalletRepository,
)


async def _insert_profile(database, profile_id: str = "user-ada") -> None:
    await ProfileRepository(database).insert_profile(
        Profile(
            id=profile_id,
            name="Ada",
            school="X",
            department="Computer Science",
            level="300",
        )
    )


class TestWalletRepository:
    """Integration tests for WalletRepository."""

    async def test_insert_and_find(self, database):
        """Test the opening wallet round trips."""
        await _insert_profile(database)
        repo = WalletRepository(database)

        created = await repo.insert_wallet(Wallet.opening("user-ada"))
        found = await repo.find_wallet("user-ada")

        assert found.id == created.id
        assert found.balance == Decimal("0.00")

    async def test_find_missing_wallet(self, database):
        """Test not-found is None."""
        assert await WalletRepository(database).find_wallet("user-ada") is None

    async def test_second_wallet_is_duplicate_key(self, database):
        """Test one wallet per user is enforced by the store."""
        await _insert_profile(database)
        repo = WalletRepository(database)
        await repo.insert_wallet(Wallet.opening("user-ada"))

        with pytest.raises(DuplicateKeyError):
            await repo.insert_wallet(Wallet.opening("user-ada"))

    async def test_orphan_wallet_is_constraint_violation(self, database):
        """Test a wallet without a profile is rejected, not a duplicate."""
        with pytest.raises(ConstraintViolationError):
            await WalletRepository(database).insert_wallet(Wallet.opening("ghost"))
