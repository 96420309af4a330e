"""
Session store interface.

Keeps the identity provider session across process restarts and OAuth
redirects, where no in-memory state survives.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ISessionStore(ABC):
    """Interface for persisting the raw provider session."""

    @abstractmethod
    def load(self) -> Optional[dict]:
        """Return the stored session, or None if nothing is stored."""

    @abstractmethod
    def save(self, session: dict) -> None:
        """Persist a session, replacing any previous one."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored session."""
