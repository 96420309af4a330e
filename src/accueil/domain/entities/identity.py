"""
Identity entity - Normalized result of authentication.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Identity:
    """
    Identity issued by the identity provider.

    Read-only input to provisioning: Accueil never creates or changes
    identities, it only derives profiles and wallets from them.

    Attributes:
        id: Stable provider-issued user id (becomes Profile.id)
        email: Email address, if the provider shares one
        display_name: Human name from provider metadata
        email_verified: Whether the email address has been confirmed
        confirmation_sent: A confirmation email was just dispatched
        metadata: User metadata stored with the identity at signup
    """

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False
    confirmation_sent: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        """Validate identity and freeze metadata."""
        if not self.id:
            raise ValueError("Identity id is required")

        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "email_verified": self.email_verified,
        }
