"""
Wallet entity - Balance ledger anchor for a profile.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

OPENING_BALANCE = Decimal("0.00")


@dataclass
class Wallet:
    """
    Wallet entity anchored to exactly one profile.

    Business rules:
    - user_id references an existing profile (never orphaned)
    - One wallet per user_id
    - Balance is non-negative with two decimal places
    - New wallets open at 0.00
    """

    user_id: str
    balance: Decimal = field(default=OPENING_BALANCE)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate wallet data after initialization."""
        if not self.user_id:
            raise ValueError("Wallet user_id is required")

        self.balance = Decimal(str(self.balance)).quantize(Decimal("0.01"))
        if self.balance < 0:
            raise ValueError(f"Wallet balance cannot be negative: {self.balance}")

    @classmethod
    def opening(cls, user_id: str) -> "Wallet":
        """Create a fresh wallet with the opening balance."""
        return cls(user_id=user_id, balance=OPENING_BALANCE)

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "balance": str(self.balance),
            "created_at": self.created_at.isoformat(),
        }
