"""
Profile entity - Application-level user record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from accueil.domain.entities.identity import Identity
from accueil.domain.value_objects.academic_level import AcademicLevel
from accueil.domain.value_objects.registration_context import (
    RegistrationContext,
)
from accueil.domain.value_objects.user_role import UserRole


@dataclass
class Profile:
    """
    Profile entity derived from an identity.

    Business rules:
    - id equals the identity id (one profile per identity)
    - name, school and department are required
    - Created once by provisioning and never updated by it
    - New profiles are buyers
    """

    id: str
    name: str
    school: str
    department: str
    level: AcademicLevel
    email: Optional[str] = None
    role: UserRole = field(default=UserRole.BUYER)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate profile data after initialization."""
        if not self.id:
            raise ValueError("Profile id is required")

        for field_name in ("name", "school", "department"):
            if not getattr(self, field_name):
                raise ValueError(f"Profile {field_name} is required")

        self.level = AcademicLevel.parse(self.level)
        self.role = UserRole(self.role)

    @classmethod
    def from_registration(
        cls,
        identity: Identity,
        context: RegistrationContext,
    ) -> "Profile":
        """
        Build the profile for a first-time identity.

        Args:
            identity: Authenticated identity
            context: Complete registration context

        Returns:
            New Profile entity (not yet persisted)

        Raises:
            ValidationError: If context is incomplete or level invalid
        """
        level = context.validate()
        return cls(
            id=identity.id,
            email=identity.email or context.email,
            name=context.name,
            school=context.school,
            department=context.department,
            level=level,
            role=UserRole.BUYER,
        )

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "school": self.school,
            "department": self.department,
            "level": self.level.value,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
        }
