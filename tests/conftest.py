"""
Test fixtures and configuration.
"""

import pytest

from accueil.application.context.app_context import ApplicationContext
from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.domain.entities.identity import Identity
from accueil.domain.value_objects.registration_context import (
    RegistrationContext,
)
from tests.helpers import FakeIdentityProvider, InMemoryRecordStore


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Empty shared record store."""
    return InMemoryRecordStore()


@pytest.fixture
def app_context() -> ApplicationContext:
    return ApplicationContext()


@pytest.fixture
def engine(store: InMemoryRecordStore, app_context: ApplicationContext):
    """Engine over the in-memory store."""
    return ProvisioningEngine(
        profile_repository=store,
        wallet_repository=store,
        app_context=app_context,
    )


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def identity() -> Identity:
    """Verified identity without signup metadata (OAuth-like)."""
    return Identity(
        id="user-ada",
        email="ada@uni.edu",
        display_name="Ada L.",
        email_verified=True,
    )


@pytest.fixture
def context() -> RegistrationContext:
    """Complete registration context."""
    return RegistrationContext(
        name="Ada",
        school="X",
        department="Computer Science",
        level="300",
    )
