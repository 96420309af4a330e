"""
Unit tests for session stores.
"""

import os
import stat

from accueil.infrastructure.auth.session_store import (
    FileSessionStore,
    InMemorySessionStore,
)


class TestInMemorySessionStore:
    """Unit tests for InMemorySessionStore."""

    def test_save_load_clear(self):
        """Test the basic lifecycle."""
        store = InMemorySessionStore()
        assert store.load() is None

        store.save({"access_token": "a"})
        assert store.load() == {"access_token": "a"}

        store.clear()
        assert store.load() is None

    def test_load_returns_copy(self):
        """Test callers cannot mutate the stored session."""
        store = InMemorySessionStore()
        store.save({"access_token": "a"})

        store.load()["access_token"] = "b"

        assert store.load() == {"access_token": "a"}


class TestFileSessionStore:
    """Unit tests for FileSessionStore."""

    def test_session_survives_new_instance(self, tmp_path):
        """Test the session persists across store instances."""
        path = tmp_path / "nested" / "session.json"
        FileSessionStore(path).save({"access_token": "a", "refresh_token": "r"})

        assert FileSessionStore(path).load() == {
            "access_token": "a",
            "refresh_token": "r",
        }

    def test_file_is_owner_only(self, tmp_path):
        """Test tokens are not world-readable."""
        path = tmp_path / "session.json"
        FileSessionStore(path).save({"access_token": "a"})

        mode = stat.S_IMODE(os.stat(path).st_mode)

        assert mode & 0o077 == 0

    def test_corrupt_file_is_no_session(self, tmp_path):
        """Test unreadable content is ignored."""
        path = tmp_path / "session.json"
        path.write_text("{not json")

        assert FileSessionStore(path).load() is None

    def test_clear_is_idempotent(self, tmp_path):
        """Test clearing twice does not fail."""
        store = FileSessionStore(tmp_path / "session.json")
        store.save({"access_token": "a"})

        store.clear()
        store.clear()

        assert store.load() is None
