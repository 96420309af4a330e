"""
Integration tests for provisioning against the SQL record store.
"""

import asyncio

from sqlalchemy import func, select

from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import ProvisioningState
from accueil.domain.entities.identity import Identity
from accueil.domain.value_objects.registration_context import (
    RegistrationContext,
)
from accueil.infrastructure.persistence.models import ProfileModel, WalletModel
from accueil.infrastructure.persistence.repositories.profile_repository import (
    ProfileRepository,
)
from accueil.infrastructure.persistence.repositories.wallet_repository import (
    WalletRepository,
)

IDENTITY = Identity(id="user-ada", email="ada@uni.edu", email_verified=True)
CONTEXT = RegistrationContext(
    name="Ada",
    school="X",
    department="Computer Science",
    level="300",
)


def _engine(database) -> ProvisioningEngine:
    return ProvisioningEngine(
        profile_repository=ProfileRepository(database),
        wallet_repository=WalletRepository(database),
    )


async def _count(database, model) -> int:
    async with database.session() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


class TestProvisioningOnDatabase:
    """End-to-end provisioning on SQLite."""

    async def test_fresh_signup(self, database):
        """Test one profile and one wallet are written."""
        outcome = await _engine(database).provision(IDENTITY, CONTEXT)

        assert outcome.state is ProvisioningState.READY
        assert await _count(database, ProfileModel) == 1
        assert await _count(database, WalletModel) == 1

    async def test_second_device_finds_existing_profile(self, database):
        """Test a later run for the same identity writes nothing."""
        await _engine(database).provision(IDENTITY, CONTEXT)

        outcome = await _engine(database).provision(IDENTITY)

        assert outcome.state is ProvisioningState.READY
        assert outcome.wallet is not None
        assert await _count(database, ProfileModel) == 1
        assert await _count(database, WalletModel) == 1

    async def test_concurrent_engines_converge(self, database):
        """Test racing engines leave exactly one profile and wallet."""
        outcomes = await asyncio.gather(
            *(_engine(database).provision(IDENTITY, CONTEXT) for _ in range(3))
        )

        assert all(outcome.is_ready for outcome in outcomes)
        assert await _count(database, ProfileModel) == 1
        assert await _count(database, WalletModel) == 1
