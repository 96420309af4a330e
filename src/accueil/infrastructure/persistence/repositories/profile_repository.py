"""
Profile repository implementation.
"""

import asyncio
from typing import Optional

from sqlalchemy import select

from accueil.domain.entities.profile import Profile
from accueil.domain.repositories.i_profile_repository import IProfileRepository
from accueil.infrastructure.persistence.database import Database
from accueil.infrastructure.persistence.models import ProfileModel
from accueil.infrastructure.persistence.repositories._errors import (
    translate_store_errors,
)


class ProfileRepository(IProfileRepository):
    """
    SQLAlchemy implementation of the profile repository.

    Every call runs in its own session and commits immediately, so a
    profile insert is visible to concurrent provisioning runs as soon
    as it returns.
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

    async def find_profile(self, profile_id: str) -> Optional[Profile]:
        """
        Get profile by identity id.

        Args:
            profile_id: Identity id

        Returns:
            Profile entity if found, None otherwise
        """
        async with translate_store_errors("profiles", profile_id, "find_profile"):
            model = await asyncio.wait_for(
                self._fetch_by_id(profile_id), timeout=self.timeout
            )

        return self._to_entity(model) if model else None

    async def _fetch_by_id(self, profile_id: str) -> Optional[ProfileModel]:
        """Fetch profile row by id."""
        async with self.database.session() as session:
            stmt = select(ProfileModel).where(ProfileModel.id == profile_id)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def insert_profile(self, profile: Profile) -> Profile:
        """
        Insert new profile.

        Args:
            profile: Profile entity to insert

        Returns:
            Inserted profile entity
        """
        async with translate_store_errors("profiles", profile.id, "insert_profile"):
            model = await asyncio.wait_for(
                self._insert(profile), timeout=self.timeout
            )

        return self._to_entity(model)

    async def _insert(self, profile: Profile) -> ProfileModel:
        """Insert profile row and commit."""
        model = ProfileModel(
            id=profile.id,
            email=profile.email,
            name=profile.name,
            school=profile.school,
            department=profile.department,
            level=profile.level.value,
            role=profile.role.value,
            created_at=profile.created_at,
        )

        async with self.database.session() as session:
            session.add(model)
            await session.flush()

        return model

    def _to_entity(self, model: ProfileModel) -> Profile:
        """
        Convert ProfileModel to Profile entity.

        Args:
            model: SQLAlchemy model

        Returns:
            Profile domain entity
        """
        return Profile(
            id=model.id,
            email=model.email,
            name=model.name,
            school=model.school,
            department=model.department,
            level=model.level,
            role=model.role,
            created_at=model.created_at,
        )
