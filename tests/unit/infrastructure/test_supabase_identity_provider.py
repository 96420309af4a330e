"""
Unit tests for SupabaseIdentityProvider.

HTTP is served by httpx.MockTransport, so no network is used.
"""

import json

import httpx
import pytest

from accueil.domain.exceptions import (
    AuthenticationError,
    EmailInUseError,
    EmailUnconfirmedError,
    IdentityProviderUnavailableError,
    InvalidCredentialsError,
)
from accueil.domain.services.i_identity_provider import AuthEvent
from accueil.infrastructure.auth.session_store import InMemorySessionStore
from accueil.infrastructure.auth.supabase_identity_provider import (
    SupabaseIdentityProvider,
    identity_from_user,
)

BASE_URL = "https://project.supabase.test"

USER = {
    "id": "user-ada",
    "email": "ada@uni.edu",
    "email_confirmed_at": "2024-01-01T00:00:00Z",
    "user_metadata": {"display_name": "Ada", "school": "X"},
}

SESSION = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "user": USER,
}


def _provider(handler, store=None) -> SupabaseIdentityProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseIdentityProvider(
        base_url=BASE_URL + "/",
        anon_key="anon-key",
        session_store=store or InMemorySessionStore(),
        client=client,
    )


class _Recorder:
    """Collects auth events delivered to a subscriber."""

    def __init__(self):
        self.events = []

    async def __call__(self, event, identity):
        self.events.append((event, identity))


class TestIdentityFromUser:
    """Unit tests for user normalization."""

    def test_confirmed_user(self):
        """Test a confirmed user becomes a verified identity."""
        identity = identity_from_user(USER)

        assert identity.id == "user-ada"
        assert identity.email_verified
        assert identity.display_name == "Ada"
        assert identity.metadata["school"] == "X"

    def test_pending_confirmation(self):
        """Test a user awaiting confirmation."""
        identity = identity_from_user(
            {
                "id": "u2",
                "email": "b@uni.edu",
                "confirmation_sent_at": "2024-01-01T00:00:00Z",
                "email_confirmed_at": None,
                "user_metadata": {"full_name": "B Google"},
            }
        )

        assert not identity.email_verified
        assert identity.confirmation_sent
        assert identity.display_name == "B Google"


class TestSignUp:
    """Unit tests for sign_up_with_password."""

    async def test_signup_pending_confirmation(self):
        """Test signup without tokens stores no session."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["apikey"] = request.headers["apikey"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "id": "user-new",
                    "email": "new@uni.edu",
                    "confirmation_sent_at": "2024-01-01T00:00:00Z",
                    "user_metadata": {"display_name": "Ada"},
                },
            )

        store = InMemorySessionStore()
        provider = _provider(handler, store)

        identity = await provider.sign_up_with_password(
            "new@uni.edu", "secret123", {"display_name": "Ada"}
        )

        assert seen["path"] == "/auth/v1/signup"
        assert seen["apikey"] == "anon-key"
        assert seen["body"]["data"] == {"display_name": "Ada"}
        assert not identity.email_verified
        assert identity.confirmation_sent
        assert store.load() is None

    async def test_signup_with_session_signs_in(self):
        """Test signup returning tokens stores the session and emits."""
        provider = _provider(lambda request: httpx.Response(200, json=SESSION))
        recorder = _Recorder()
        provider.subscribe(recorder)

        identity = await provider.sign_up_with_password("ada@uni.edu", "secret123")

        assert identity.email_verified
        assert provider.session_store.load()["access_token"] == "access-1"
        assert recorder.events == [(AuthEvent.SIGNED_IN, identity)]

    async def test_signup_email_in_use(self):
        """Test existing email maps to EmailInUseError."""
        provider = _provider(
            lambda request: httpx.Response(
                422,
                json={"error_code": "user_already_exists", "msg": "exists"},
            )
        )

        with pytest.raises(EmailInUseError):
            await provider.sign_up_with_password("ada@uni.edu", "secret123")

    async def test_signup_weak_password(self):
        """Test provider validation maps to InvalidCredentialsError."""
        provider = _provider(
            lambda request: httpx.Response(
                422,
                json={"error_code": "weak_password", "msg": "too short"},
            )
        )

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await provider.sign_up_with_password("ada@uni.edu", "1")

        assert exc_info.value.message == "too short"


class TestSignIn:
    """Unit tests for sign_in_with_password."""

    async def test_sign_in_uses_password_grant(self):
        """Test the password grant and session persistence."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["grant_type"] = request.url.params["grant_type"]
            return httpx.Response(200, json=SESSION)

        provider = _provider(handler)

        identity = await provider.sign_in_with_password("ada@uni.edu", "secret123")

        assert seen["grant_type"] == "password"
        assert identity.id == "user-ada"
        assert provider.session_store.load()["refresh_token"] == "refresh-1"

    async def test_sign_in_unconfirmed(self):
        """Test unconfirmed email maps to EmailUnconfirmedError."""
        provider = _provider(
            lambda request: httpx.Response(
                400,
                json={"error_code": "email_not_confirmed", "msg": "not confirmed"},
            )
        )

        with pytest.raises(EmailUnconfirmedError):
            await provider.sign_in_with_password("ada@uni.edu", "secret123")

    async def test_sign_in_bad_password(self):
        """Test wrong credentials map to InvalidCredentialsError."""
        provider = _provider(
            lambda request: httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "bad"},
            )
        )

        with pytest.raises(InvalidCredentialsError):
            await provider.sign_in_with_password("ada@uni.edu", "wrong")

    async def test_server_error_is_unavailable(self):
        """Test 5xx maps to IdentityProviderUnavailableError."""
        provider = _provider(lambda request: httpx.Response(503))

        with pytest.raises(IdentityProviderUnavailableError):
            await provider.sign_in_with_password("ada@uni.edu", "secret123")

    async def test_transport_error_is_unavailable(self):
        """Test connection failures map to IdentityProviderUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider = _provider(handler)

        with pytest.raises(IdentityProviderUnavailableError):
            await provider.sign_in_with_password("ada@uni.edu", "secret123")


class TestOAuth:
    """Unit tests for the OAuth redirect flow."""

    def test_begin_oauth_url(self):
        """Test the authorize URL carries provider and redirect."""
        provider = _provider(lambda request: httpx.Response(500))

        url = provider.begin_oauth("google", "https://app.test")

        assert url.startswith(f"{BASE_URL}/auth/v1/authorize?")
        assert "provider=google" in url
        assert "redirect_to=https%3A%2F%2Fapp.test" in url

    async def test_complete_redirect_establishes_session(self):
        """Test fragment tokens are validated and stored."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=USER)

        provider = _provider(handler)

        identity = await provider.complete_oauth_redirect(
            "https://app.test/#access_token=tok&refresh_token=ref&token_type=bearer"
        )

        assert seen["auth"] == "Bearer tok"
        assert identity.id == "user-ada"
        assert provider.session_store.load()["refresh_token"] == "ref"

    async def test_complete_redirect_with_error(self):
        """Test a provider error in the redirect is raised."""
        provider = _provider(lambda request: httpx.Response(500))

        with pytest.raises(AuthenticationError) as exc_info:
            await provider.complete_oauth_redirect(
                "https://app.test/#error=access_denied&error_description=Denied"
            )

        assert exc_info.value.message == "Denied"

    async def test_complete_redirect_without_token(self):
        """Test a redirect with no token is rejected."""
        provider = _provider(lambda request: httpx.Response(500))

        with pytest.raises(AuthenticationError):
            await provider.complete_oauth_redirect("https://app.test/")


class TestSession:
    """Unit tests for session restore and sign-out."""

    async def test_no_stored_session(self):
        """Test nothing stored means no identity and no request."""
        calls = []
        provider = _provider(lambda request: calls.append(request))

        assert await provider.get_current_session() is None
        assert calls == []

    async def test_valid_stored_session(self):
        """Test a stored token is validated against /user."""
        store = InMemorySessionStore()
        store.save(SESSION)
        provider = _provider(lambda request: httpx.Response(200, json=USER), store)

        identity = await provider.get_current_session()

        assert identity.id == "user-ada"

    async def test_expired_session_is_refreshed(self):
        """Test a rejected token is refreshed once."""
        store = InMemorySessionStore()
        store.save(SESSION)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/user"):
                return httpx.Response(401, json={"msg": "expired"})
            assert request.url.params["grant_type"] == "refresh_token"
            return httpx.Response(
                200,
                json={**SESSION, "access_token": "access-2"},
            )

        provider = _provider(handler, store)

        identity = await provider.get_current_session()

        assert identity.id == "user-ada"
        assert store.load()["access_token"] == "access-2"

    async def test_unrefreshable_session_is_cleared(self):
        """Test a dead session is dropped."""
        store = InMemorySessionStore()
        store.save(SESSION)
        provider = _provider(
            lambda request: httpx.Response(401, json={"msg": "expired"}),
            store,
        )

        assert await provider.get_current_session() is None
        assert store.load() is None

    async def test_sign_out_clears_even_when_offline(self):
        """Test local sign-out survives a failed revoke."""
        store = InMemorySessionStore()
        store.save(SESSION)
        provider = _provider(lambda request: httpx.Response(503), store)
        recorder = _Recorder()
        provider.subscribe(recorder)

        await provider.sign_out()

        assert store.load() is None
        assert recorder.events == [(AuthEvent.SIGNED_OUT, None)]

    async def test_failing_subscriber_does_not_block_others(self):
        """Test one subscriber raising does not stop delivery."""
        provider = _provider(lambda request: httpx.Response(204))

        async def broken(event, identity):
            raise RuntimeError("listener bug")

        recorder = _Recorder()
        provider.subscribe(broken)
        provider.subscribe(recorder)

        await provider.sign_out()

        assert recorder.events == [(AuthEvent.SIGNED_OUT, None)]

    async def test_unsubscribe(self):
        """Test unsubscribed listeners get no events."""
        provider = _provider(lambda request: httpx.Response(204))
        recorder = _Recorder()
        unsubscribe = provider.subscribe(recorder)

        unsubscribe()
        await provider.sign_out()

        assert recorder.events == []
