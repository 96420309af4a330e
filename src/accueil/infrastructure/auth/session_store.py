"""
Session store implementations.
"""

import json
import os
from pathlib import Path
from typing import Optional

from accueil.domain.services.i_session_store import ISessionStore
from accueil.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class InMemorySessionStore(ISessionStore):
    """
    In-memory session store.

    Session is lost when the process exits; use FileSessionStore
    when the session must survive an OAuth redirect or restart.
    """

    def __init__(self):
        self._session: Optional[dict] = None

    def load(self) -> Optional[dict]:
        return dict(self._session) if self._session else None

    def save(self, session: dict) -> None:
        self._session = dict(session)

    def clear(self) -> None:
        self._session = None


class FileSessionStore(ISessionStore):
    """
    JSON file session store.

    The file holds access and refresh tokens, so it is written with
    owner-only permissions.
    """

    def __init__(self, path: str | Path):
        """
        Initialize file store.

        Args:
            path: Session file location (parent dirs are created)
        """
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        """Read the session file, treating unreadable content as no session."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

        return data if isinstance(data, dict) else None

    def save(self, session: dict) -> None:
        """Write the session atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(session, f)

        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        """Delete the session file if present."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
