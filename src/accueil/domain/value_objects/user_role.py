"""
UserRole value object - Marketplace role of a profile.
"""

from enum import Enum


class UserRole(str, Enum):
    """Marketplace roles. Every provisioned profile starts as a buyer."""

    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
