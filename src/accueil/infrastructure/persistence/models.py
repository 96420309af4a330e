"""
SQLAlchemy models for Accueil persistence.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    DECIMAL,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

LEVEL_VALUES = ("100", "200", "300", "400", "500", "postgraduate")
ROLE_VALUES = ("buyer", "seller", "admin")


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Base(DeclarativeBase):
    """Base class for all models."""


class ProfileModel(Base):
    """Profile database model - one row per identity."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(_in_clause("level", LEVEL_VALUES), name="ck_profiles_level"),
        CheckConstraint(_in_clause("role", ROLE_VALUES), name="ck_profiles_role"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(255), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="buyer")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class WalletModel(Base):
    """Wallet database model - at most one per profile."""

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("profiles.id"),
        unique=True,
        index=True,
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=12, scale=2), nullable=False, default=Decimal("0.00")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
