"""
RegistrationContext value object - Fields a profile cannot exist without.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from accueil.domain.exceptions.base import ValidationError
from accueil.domain.value_objects.academic_level import AcademicLevel

REQUIRED_FIELDS: tuple[str, ...] = ("name", "school", "department", "level")

# Matches the profiles table column width
MAX_FIELD_LENGTH = 255

# Offered by the registration form; any other department is accepted too.
SUGGESTED_DEPARTMENTS: tuple[str, ...] = (
    "Computer Science",
    "Engineering",
    "Medicine",
    "Law",
    "Business Administration",
    "Economics",
    "Psychology",
    "Biology",
    "Chemistry",
    "Physics",
    "Mathematics",
    "English",
    "Other",
)


@dataclass(frozen=True)
class RegistrationContext:
    """
    Registration form data supplied by an entry point.

    Business rules:
    - name, school, department and level are all required
    - level must be one of the enumerated academic levels
    - name, school and department are at most 255 characters
    - email is optional; the identity's email wins when present
    - Blank strings count as missing
    """

    name: str = ""
    school: str = ""
    department: str = ""
    level: str = ""
    email: Optional[str] = None

    def __post_init__(self):
        """Trim whitespace so blank input is detected as missing."""
        for field_name in REQUIRED_FIELDS:
            value = getattr(self, field_name)
            cleaned = "" if value is None else str(value).strip()
            object.__setattr__(self, field_name, cleaned)

    def missing_fields(self) -> tuple[str, ...]:
        """Return required fields that are still blank, in form order."""
        return tuple(name for name in REQUIRED_FIELDS if not getattr(self, name))

    def is_complete(self) -> bool:
        """Check whether every required field is filled in."""
        return not self.missing_fields()

    def validate(self) -> AcademicLevel:
        """
        Validate the context for profile creation.

        Returns:
            Parsed academic level

        Raises:
            ValidationError: If a field is missing or too long, or level
                is unknown
        """
        missing = self.missing_fields()
        if missing:
            raise ValidationError(
                field=missing[0],
                reason="Please fill in all required fields",
            )

        for field_name in ("name", "school", "department"):
            if len(getattr(self, field_name)) > MAX_FIELD_LENGTH:
                raise ValidationError(
                    field=field_name,
                    reason=f"Must be at most {MAX_FIELD_LENGTH} characters",
                )

        try:
            return AcademicLevel.parse(self.level)
        except ValueError as e:
            raise ValidationError(field="level", reason=str(e)) from e

    def merged_with(self, other: "RegistrationContext") -> "RegistrationContext":
        """Fill blanks in this context from another one."""
        return RegistrationContext(
            name=self.name or other.name,
            school=self.school or other.school,
            department=self.department or other.department,
            level=self.level or other.level,
            email=self.email or other.email,
        )

    def to_metadata(self) -> dict:
        """Convert to identity user metadata sent with signup."""
        return {
            "display_name": self.name,
            "school": self.school,
            "department": self.department,
            "level": self.level,
        }

    @classmethod
    def from_metadata(
        cls,
        metadata: Optional[Mapping[str, Any]],
    ) -> "RegistrationContext":
        """
        Rebuild a context from identity user metadata.

        Missing keys yield blank fields; check is_complete() before use.
        """
        metadata = metadata or {}
        return cls(
            name=metadata.get("display_name") or "",
            school=metadata.get("school") or "",
            department=metadata.get("department") or "",
            level=str(metadata.get("level") or ""),
        )
