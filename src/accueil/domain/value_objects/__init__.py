"""
Value objects for Accueil domain.
"""

from accueil.domain.value_objects.academic_level import AcademicLevel
from accueil.domain.value_objects.registration_context import (
    REQUIRED_FIELDS,
    SUGGESTED_DEPARTMENTS,
    RegistrationContext,
)
from accueil.domain.value_objects.user_role import UserRole

__all__ = [
    "AcademicLevel",
    "UserRole",
    "RegistrationContext",
    "REQUIRED_FIELDS",
    "SUGGESTED_DEPARTMENTS",
]
