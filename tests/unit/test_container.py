"""
Unit tests for the DI container wiring.
"""

from accueil.config.settings import Settings
from accueil.di.container import DIContainer, get_container, reset_container
from accueil.infrastructure.auth.session_store import (
    FileSessionStore,
    InMemorySessionStore,
)


def _settings(**overrides) -> Settings:
    values = {
        "SUPABASE_URL": "http://localhost:54321",
        "SUPABASE_ANON_KEY": "anon",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "SESSION_FILE": None,
    }
    values.update(overrides)
    return Settings(**values)


class TestDIContainer:
    """Unit tests for DIContainer."""

    def test_flows_share_engine_and_context(self):
        """Test every flow uses the same engine and app context."""
        container = DIContainer(settings=_settings())

        register = container.get_register_with_password()
        resume = container.get_resume_session()
        ensure = container.get_ensure_wallet()

        assert register.engine is container.engine
        assert resume.engine is container.engine
        assert ensure.app_context is container.app_context
        assert container.engine.app_context is container.app_context
        assert container.get_resume_session() is resume

    def test_session_store_follows_settings(self, tmp_path):
        """Test SESSION_FILE selects the file store."""
        in_memory = DIContainer(settings=_settings())
        on_disk = DIContainer(
            settings=_settings(SESSION_FILE=str(tmp_path / "session.json"))
        )

        assert isinstance(in_memory.session_store, InMemorySessionStore)
        assert isinstance(on_disk.session_store, FileSessionStore)

    def test_oauth_defaults_from_settings(self):
        """Test OAuth flow picks up provider and redirect."""
        container = DIContainer(
            settings=_settings(OAUTH_REDIRECT_URL="https://app.test")
        )

        oauth = container.get_complete_oauth_sign_in()

        assert oauth.default_provider == "google"
        assert oauth.redirect_url == "https://app.test"

    async def test_initialize_and_shutdown(self):
        """Test lifecycle connects and releases resources."""
        container = DIContainer(settings=_settings())

        await container.initialize()
        assert await container.database.health_check()

        await container.shutdown()
        assert not await container.database.health_check()

    def test_global_container(self):
        """Test module-level accessor caches one container."""
        reset_container()
        try:
            assert get_container() is get_container()
        finally:
            reset_container()
