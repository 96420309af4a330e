"""
Identity provider interface.

Defines authentication operations Accueil needs from the hosted
identity service. Transport details (password hashing, token issuance,
OAuth redirects) stay behind this boundary.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from accueil.domain.entities.identity import Identity


class AuthEvent(str, Enum):
    """Authentication events delivered to subscribers."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthChangeCallback = Callable[[AuthEvent, Optional[Identity]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class IIdentityProvider(ABC):
    """Abstract interface for the identity provider."""

    @abstractmethod
    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Identity:
        """
        Register a new identity with email and password.

        Args:
            email: Email address
            password: Plain password (hashed by the provider)
            metadata: User metadata stored with the identity

        Returns:
            Created identity (possibly with email_verified=False)

        Raises:
            InvalidCredentialsError: If email or password is rejected
            EmailInUseError: If the email is already registered
            IdentityProviderUnavailableError: If the provider is unreachable
        """

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If credentials are wrong
            EmailUnconfirmedError: If the email is not confirmed yet
            IdentityProviderUnavailableError: If the provider is unreachable
        """

    @abstractmethod
    def begin_oauth(self, provider: str, redirect_to: Optional[str] = None) -> str:
        """
        Start an OAuth sign-in.

        Control leaves the process: the caller sends the user to the
        returned URL and nothing about the flow is kept in memory.

        Args:
            provider: OAuth provider name (e.g. "google")
            redirect_to: URL the provider returns to

        Returns:
            Provider authorize URL
        """

    @abstractmethod
    async def complete_oauth_redirect(self, callback_url: str) -> Identity:
        """
        Establish the session carried by an OAuth redirect URL.

        Raises:
            AuthenticationError: If the URL carries an error or no tokens
            IdentityProviderUnavailableError: If the provider is unreachable
        """

    @abstractmethod
    async def get_current_session(self) -> Optional[Identity]:
        """
        Get the identity of the persisted session.

        Returns:
            Identity if a valid session exists, None otherwise

        Raises:
            IdentityProviderUnavailableError: If the provider is unreachable
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign out and forget the persisted session."""

    @abstractmethod
    def subscribe(self, on_change: AuthChangeCallback) -> Unsubscribe:
        """
        Subscribe to sign-in and sign-out events.

        Args:
            on_change: Coroutine called with (event, identity or None)

        Returns:
            Function that removes the subscription
        """
