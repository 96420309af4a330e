"""
Dependency Injection Container for Accueil.

Manages all service instances and their dependencies.
"""

from typing import Optional

from accueil.application.context.app_context import ApplicationContext
from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.use_cases.complete_oauth_sign_in import (
    CompleteOAuthSignIn,
)
from accueil.application.use_cases.ensure_wallet import EnsureWallet
from accueil.application.use_cases.register_with_password import (
    RegisterWithPassword,
)
from accueil.application.use_cases.resume_session import ResumeSession
from accueil.application.use_cases.sign_in_with_password import (
    SignInWithPassword,
)
from accueil.application.use_cases.sign_out import SignOut
from accueil.config.settings import Settings, get_settings
from accueil.domain.repositories.i_profile_repository import IProfileRepository
from accueil.domain.repositories.i_wallet_repository import IWalletRepository
from accueil.domain.services.i_session_store import ISessionStore
from accueil.infrastructure.auth.session_store import (
    FileSessionStore,
    InMemorySessionStore,
)
from accueil.infrastructure.auth.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from accueil.infrastructure.persistence.database import Database
from accueil.infrastructure.persistence.repositories.profile_repository import (
    ProfileRepository,
)
from accueil.infrastructure.persistence.repositories.wallet_repository import (
    WalletRepository,
)


class DIContainer:
    """
    Dependency Injection Container.

    Manages singleton instances of services, repositories and flows.
    One container per process, so one ApplicationContext and one
    ProvisioningEngine are shared by every entry point.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize container with None instances.

        Args:
            settings: Settings to use (defaults to get_settings())
        """
        self._settings = settings

        # Infrastructure
        self._database: Optional[Database] = None
        self._session_store: Optional[ISessionStore] = None
        self._identity_provider: Optional[SupabaseIdentityProvider] = None

        # Repositories
        self._profile_repository: Optional[IProfileRepository] = None
        self._wallet_repository: Optional[IWalletRepository] = None

        # Application
        self._app_context: Optional[ApplicationContext] = None
        self._engine: Optional[ProvisioningEngine] = None
        self._resume_session: Optional[ResumeSession] = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    async def initialize(self) -> None:
        """Initialize services and establish connections."""
        await self.database.connect()

    async def shutdown(self) -> None:
        """Cleanup resources and close connections."""
        if self._resume_session:
            self._resume_session.stop()

        if self._identity_provider:
            await self._identity_provider.close()

        if self._database:
            await self._database.disconnect()

    # Infrastructure Getters

    @property
    def database(self) -> Database:
        """Get database instance."""
        if self._database is None:
            self._database = Database(
                database_url=self.settings.DATABASE_URL,
                echo=self.settings.DATABASE_ECHO,
            )
        return self._database

    @property
    def session_store(self) -> ISessionStore:
        """Get session store (file-backed unless SESSION_FILE is unset)."""
        if self._session_store is None:
            if self.settings.SESSION_FILE:
                self._session_store = FileSessionStore(self.settings.SESSION_FILE)
            else:
                self._session_store = InMemorySessionStore()
        return self._session_store

    @property
    def identity_provider(self) -> SupabaseIdentityProvider:
        """Get identity provider client."""
        if self._identity_provider is None:
            self._identity_provider = SupabaseIdentityProvider(
                base_url=self.settings.SUPABASE_URL,
                anon_key=self.settings.SUPABASE_ANON_KEY,
                session_store=self.session_store,
                timeout=self.settings.IDENTITY_TIMEOUT,
            )
        return self._identity_provider

    # Repository Getters

    @property
    def profile_repository(self) -> IProfileRepository:
        """Get profile repository instance."""
        if self._profile_repository is None:
            self._profile_repository = ProfileRepository(
                self.database,
                timeout=self.settings.DATABASE_TIMEOUT,
            )
        return self._profile_repository

    @property
    def wallet_repository(self) -> IWalletRepository:
        """Get wallet repository instance."""
        if self._wallet_repository is None:
            self._wallet_repository = WalletRepository(
                self.database,
                timeout=self.settings.DATABASE_TIMEOUT,
            )
        return self._wallet_repository

    # Application Getters

    @property
    def app_context(self) -> ApplicationContext:
        """Get the process-wide application context."""
        if self._app_context is None:
            self._app_context = ApplicationContext()
        return self._app_context

    @property
    def engine(self) -> ProvisioningEngine:
        """Get the provisioning engine."""
        if self._engine is None:
            self._engine = ProvisioningEngine(
                profile_repository=self.profile_repository,
                wallet_repository=self.wallet_repository,
                app_context=self.app_context,
            )
        return self._engine

    # Use Case Getters

    def get_register_with_password(self) -> RegisterWithPassword:
        """Get registration use case."""
        return RegisterWithPassword(
            identity_provider=self.identity_provider,
            engine=self.engine,
        )

    def get_sign_in_with_password(self) -> SignInWithPassword:
        """Get password sign-in use case."""
        return SignInWithPassword(
            identity_provider=self.identity_provider,
            engine=self.engine,
        )

    def get_complete_oauth_sign_in(self) -> CompleteOAuthSignIn:
        """Get OAuth sign-in use case."""
        return CompleteOAuthSignIn(
            identity_provider=self.identity_provider,
            engine=self.engine,
            default_provider=self.settings.OAUTH_PROVIDER,
            redirect_url=self.settings.OAUTH_REDIRECT_URL,
        )

    def get_resume_session(self) -> ResumeSession:
        """Get session resume use case (one subscription per container)."""
        if self._resume_session is None:
            self._resume_session = ResumeSession(
                identity_provider=self.identity_provider,
                engine=self.engine,
                app_context=self.app_context,
            )
        return self._resume_session

    def get_sign_out(self) -> SignOut:
        """Get sign-out use case."""
        return SignOut(identity_provider=self.identity_provider)

    def get_ensure_wallet(self) -> EnsureWallet:
        """Get wallet healing use case."""
        return EnsureWallet(engine=self.engine, app_context=self.app_context)


# Global container instance
_container: Optional[DIContainer] = None


def get_container() -> DIContainer:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = DIContainer()
    return _container


async def initialize_container() -> DIContainer:
    """Initialize and return DI container."""
    container = get_container()
    await container.initialize()
    return container


async def shutdown_container() -> None:
    """Shutdown DI container."""
    container = get_container()
    await container.shutdown()


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    _container = None
