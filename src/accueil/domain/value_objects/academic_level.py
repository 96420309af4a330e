"""
AcademicLevel value object - Student year of study.
"""

from enum import Enum


class AcademicLevel(str, Enum):
    """Year of study a student profile is registered at."""

    L100 = "100"
    L200 = "200"
    L300 = "300"
    L400 = "400"
    L500 = "500"
    POSTGRADUATE = "postgraduate"

    @classmethod
    def parse(cls, value: "str | int | AcademicLevel") -> "AcademicLevel":
        """
        Parse a level from user input.

        Accepts the enum itself, "300", 300 or "Postgraduate".

        Raises:
            ValueError: If value is not a known level
        """
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower()
        for level in cls:
            if level.value == normalized:
                return level

        allowed = ", ".join(level.value for level in cls)
        raise ValueError(f"Invalid level '{value}'. Must be one of: {allowed}")
