"""
Supabase identity provider implementation.

Talks to the hosted backend's GoTrue REST API over httpx and persists
the resulting session through an ISessionStore, so the session is
still there after an OAuth redirect or a process restart.
"""

import asyncio
from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx

from accueil.domain.entities.identity import Identity
from accueil.domain.exceptions.auth import (
    AuthenticationError,
    EmailInUseError,
    EmailUnconfirmedError,
    IdentityProviderUnavailableError,
    InvalidCredentialsError,
)
from accueil.domain.services.i_identity_provider import (
    AuthChangeCallback,
    AuthEvent,
    IIdentityProvider,
    Unsubscribe,
)
from accueil.domain.services.i_session_store import ISessionStore
from accueil.infrastructure.auth.session_store import InMemorySessionStore
from accueil.infrastructure.monitoring.logger import get_logger
from accueil.infrastructure.monitoring.metrics import identity_requests_total

logger = get_logger(__name__)

EMAIL_IN_USE_CODES = {"user_already_exists", "email_exists"}
EMAIL_UNCONFIRMED_CODES = {"email_not_confirmed"}
INVALID_CREDENTIAL_CODES = {
    "invalid_credentials",
    "invalid_grant",
    "weak_password",
    "validation_failed",
    "email_address_invalid",
}


def identity_from_user(user: Mapping[str, Any]) -> Identity:
    """
    Normalize a GoTrue user object into an Identity.

    Args:
        user: "user" object from any auth endpoint

    Returns:
        Identity entity
    """
    metadata = user.get("user_metadata") or {}
    display_name = (
        metadata.get("display_name")
        or metadata.get("full_name")
        or metadata.get("name")
    )
    confirmed_at = user.get("email_confirmed_at") or user.get("confirmed_at")

    return Identity(
        id=str(user["id"]),
        email=user.get("email") or None,
        display_name=display_name,
        email_verified=confirmed_at is not None,
        confirmation_sent=user.get("confirmation_sent_at") is not None,
        metadata=metadata,
    )


class SupabaseIdentityProvider(IIdentityProvider):
    """
    GoTrue (Supabase Auth) client.

    Design:
    - HTTP client is lazily created, or injected for tests
    - Session tokens live in the session store, never only in memory
    - Subscribers are awaited in order; one failing does not stop others
    - Transport errors and 5xx map to IdentityProviderUnavailableError
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        session_store: Optional[ISessionStore] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize identity provider client.

        Args:
            base_url: Hosted backend base URL (without /auth/v1)
            anon_key: Public anon API key
            session_store: Where the session is persisted
            timeout: Request timeout in seconds
            client: Optional preconfigured HTTP client
        """
        self.base_url = base_url.rstrip("/")
        self.auth_url = f"{self.base_url}/auth/v1"
        self.anon_key = anon_key
        self.session_store = session_store or InMemorySessionStore()
        self.timeout = timeout
        self._client = client
        self._lock = asyncio.Lock()
        self._subscribers: list[AuthChangeCallback] = []

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized (lazy)."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        limits=httpx.Limits(
                            max_connections=10,
                            max_keepalive_connections=5,
                        ),
                    )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ================================================================
    # HTTP plumbing
    # ================================================================

    def _headers(self, access_token: Optional[str] = None) -> dict:
        headers = {
            "apikey": self.anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        access_token: Optional[str] = None,
    ) -> httpx.Response:
        """
        Send one request to the auth API.

        Raises:
            IdentityProviderUnavailableError: On transport error or 5xx
        """
        client = await self._ensure_client()
        try:
            response = await client.request(
                method,
                f"{self.auth_url}{path}",
                json=json,
                params=params,
                headers=self._headers(access_token),
            )
        except httpx.RequestError as e:
            identity_requests_total.labels(
                operation=operation, status="unavailable"
            ).inc()
            raise IdentityProviderUnavailableError(operation, repr(e)) from e

        if response.status_code >= 500:
            identity_requests_total.labels(
                operation=operation, status="unavailable"
            ).inc()
            raise IdentityProviderUnavailableError(
                operation, f"HTTP {response.status_code}"
            )

        status = "success" if response.is_success else "rejected"
        identity_requests_total.labels(operation=operation, status=status).inc()
        return response

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[str, str]:
        """Extract (error_code, message) from an error body."""
        try:
            body = response.json()
        except ValueError:
            return "", response.text

        if not isinstance(body, dict):
            return "", response.text

        code = body.get("error_code") or body.get("error") or ""
        message = (
            body.get("msg")
            or body.get("message")
            or body.get("error_description")
            or response.text
        )
        return str(code), str(message)

    # ================================================================
    # Session handling
    # ================================================================

    async def _establish_session(self, session: dict) -> Identity:
        """Persist a session payload and announce the sign-in."""
        identity = identity_from_user(session["user"])
        self.session_store.save(
            {
                "access_token": session.get("access_token"),
                "refresh_token": session.get("refresh_token"),
                "user": session["user"],
            }
        )
        await self._emit(AuthEvent.SIGNED_IN, identity)
        return identity

    async def _fetch_user(self, access_token: str) -> Optional[dict]:
        """Return the user for an access token, None if the token is rejected."""
        response = await self._request(
            "get_user", "GET", "/user", access_token=access_token
        )
        if response.status_code in (401, 403):
            return None
        if not response.is_success:
            _, message = self._error_details(response)
            raise AuthenticationError(message)
        return response.json()

    async def _refresh(self, refresh_token: str) -> Optional[dict]:
        """Exchange a refresh token for a new session, None if rejected."""
        response = await self._request(
            "refresh",
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        if not response.is_success:
            return None
        return response.json()

    # ================================================================
    # IIdentityProvider
    # ================================================================

    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Identity:
        """
        Register a new identity.

        When email confirmation is enabled the API returns a bare user
        (no tokens); the identity then has email_verified=False and no
        session is stored.
        """
        response = await self._request(
            "sign_up",
            "POST",
            "/signup",
            json={
                "email": email,
                "password": password,
                "data": dict(metadata or {}),
            },
        )

        if not response.is_success:
            code, message = self._error_details(response)
            if code in EMAIL_IN_USE_CODES:
                raise EmailInUseError(email)
            if code in INVALID_CREDENTIAL_CODES or response.status_code in (
                400,
                422,
            ):
                raise InvalidCredentialsError(message)
            raise AuthenticationError(message)

        body = response.json()
        if body.get("access_token") and body.get("user"):
            return await self._establish_session(body)

        # Confirmation pending: body is the user object itself
        user = body.get("user") or body
        return identity_from_user(user)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        response = await self._request(
            "sign_in",
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

        if not response.is_success:
            code, message = self._error_details(response)
            if code in EMAIL_UNCONFIRMED_CODES:
                raise EmailUnconfirmedError()
            if code in INVALID_CREDENTIAL_CODES or response.status_code in (
                400,
                401,
            ):
                raise InvalidCredentialsError(message)
            raise AuthenticationError(message)

        return await self._establish_session(response.json())

    def begin_oauth(self, provider: str, redirect_to: Optional[str] = None) -> str:
        """Build the provider authorize URL."""
        query = {"provider": provider}
        if redirect_to:
            query["redirect_to"] = redirect_to

        logger.info(f"Starting OAuth sign-in with {provider}")
        return f"{self.auth_url}/authorize?{urlencode(query)}"

    async def complete_oauth_redirect(self, callback_url: str) -> Identity:
        """
        Establish the session from the tokens in a redirect URL.

        The provider puts access_token/refresh_token (or error and
        error_description) in the URL fragment.
        """
        parts = urlsplit(callback_url)
        params = {
            key: values[0]
            for key, values in parse_qs(parts.fragment or parts.query).items()
        }

        if "error" in params:
            raise AuthenticationError(
                params.get("error_description") or params["error"]
            )

        access_token = params.get("access_token")
        if not access_token:
            raise AuthenticationError("OAuth redirect carried no access token")

        user = await self._fetch_user(access_token)
        if user is None:
            raise AuthenticationError("OAuth access token was rejected")

        return await self._establish_session(
            {
                "access_token": access_token,
                "refresh_token": params.get("refresh_token"),
                "user": user,
            }
        )

    async def get_current_session(self) -> Optional[Identity]:
        """
        Validate the stored session and return its identity.

        An expired access token is refreshed once; if that fails the
        stored session is dropped.
        """
        stored = self.session_store.load()
        if not stored or not stored.get("access_token"):
            return None

        user = await self._fetch_user(stored["access_token"])
        if user is not None:
            return identity_from_user(user)

        refresh_token = stored.get("refresh_token")
        refreshed = await self._refresh(refresh_token) if refresh_token else None
        if refreshed is None or not refreshed.get("user"):
            logger.info("Stored session expired and could not be refreshed")
            self.session_store.clear()
            return None

        self.session_store.save(
            {
                "access_token": refreshed.get("access_token"),
                "refresh_token": refreshed.get("refresh_token"),
                "user": refreshed["user"],
            }
        )
        return identity_from_user(refreshed["user"])

    async def sign_out(self) -> None:
        """
        Revoke the session and forget it locally.

        Remote revocation is best effort: the local session is cleared
        and SIGNED_OUT emitted even if the provider is unreachable.
        """
        stored = self.session_store.load()
        if stored and stored.get("access_token"):
            try:
                await self._request(
                    "sign_out",
                    "POST",
                    "/logout",
                    access_token=stored["access_token"],
                )
            except IdentityProviderUnavailableError as e:
                logger.warning(f"Remote sign-out failed, clearing locally: {e}")

        self.session_store.clear()
        await self._emit(AuthEvent.SIGNED_OUT, None)

    def subscribe(self, on_change: AuthChangeCallback) -> Unsubscribe:
        """Register an auth state listener."""
        self._subscribers.append(on_change)

        def unsubscribe() -> None:
            if on_change in self._subscribers:
                self._subscribers.remove(on_change)

        return unsubscribe

    async def _emit(self, event: AuthEvent, identity: Optional[Identity]) -> None:
        """Deliver an event to every subscriber."""
        for callback in list(self._subscribers):
            try:
                await callback(event, identity)
            except Exception:
                logger.exception(f"Auth subscriber failed handling {event.value}")
