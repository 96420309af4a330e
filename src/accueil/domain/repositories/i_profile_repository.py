"""
Profile repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from accueil.domain.entities.profile import Profile


class IProfileRepository(ABC):
    """
    Interface for profile persistence operations.

    No multi-row transaction is offered: each call commits on its own.
    """

    @abstractmethod
    async def find_profile(self, profile_id: str) -> Optional[Profile]:
        """
        Get profile by identity id.

        Args:
            profile_id: Identity id the profile was created for

        Returns:
            Profile entity if found, None if no row exists

        Raises:
            RecordStoreUnavailableError: If the lookup itself fails
        """

    @abstractmethod
    async def insert_profile(self, profile: Profile) -> Profile:
        """
        Insert a new profile.

        Args:
            profile: Profile entity to insert

        Returns:
            Inserted profile entity

        Raises:
            DuplicateKeyError: If a profile with this id already exists
            ConstraintViolationError: If any other constraint is violated
            RecordStoreUnavailableError: If the store cannot be reached
        """
