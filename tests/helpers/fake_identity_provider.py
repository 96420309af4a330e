"""
Fake identity provider.
"""

from typing import Any, Mapping, Optional

from accueil.domain.entities.identity import Identity
from accueil.domain.services.i_identity_provider import (
    AuthChangeCallback,
    AuthEvent,
    IIdentityProvider,
    Unsubscribe,
)


class FakeIdentityProvider(IIdentityProvider):
    """
    Scriptable identity provider.

    Tests set `next_identity` (returned by sign-up, sign-in and OAuth
    completion) or `session`, or `error` to make the next call raise.
    """

    def __init__(self, session: Optional[Identity] = None):
        self.session = session
        self.next_identity: Optional[Identity] = None
        self.error: Optional[Exception] = None
        self.signup_calls: list[dict] = []
        self.oauth_callbacks: list[str] = []
        self._subscribers: list[AuthChangeCallback] = []

    def _raise_if_scripted(self) -> None:
        if self.error is not None:
            error, self.error = self.error, None
            raise error

    async def _sign_in(self, identity: Identity) -> Identity:
        if identity.email_verified:
            self.session = identity
            await self.emit(AuthEvent.SIGNED_IN, identity)
        return identity

    async def sign_up_with_password(
        self,
        email: str,
        password: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> Identity:
        self.signup_calls.append(
            {"email": email, "password": password, "metadata": dict(metadata or {})}
        )
        self._raise_if_scripted()
        return await self._sign_in(self.next_identity)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        self._raise_if_scripted()
        return await self._sign_in(self.next_identity)

    def begin_oauth(self, provider: str, redirect_to: Optional[str] = None) -> str:
        url = f"https://auth.test/authorize?provider={provider}"
        if redirect_to:
            url += f"&redirect_to={redirect_to}"
        return url

    async def complete_oauth_redirect(self, callback_url: str) -> Identity:
        self.oauth_callbacks.append(callback_url)
        self._raise_if_scripted()
        return await self._sign_in(self.next_identity)

    async def get_current_session(self) -> Optional[Identity]:
        self._raise_if_scripted()
        return self.session

    async def sign_out(self) -> None:
        self.session = None
        await self.emit(AuthEvent.SIGNED_OUT, None)

    def subscribe(self, on_change: AuthChangeCallback) -> Unsubscribe:
        self._subscribers.append(on_change)

        def unsubscribe() -> None:
            if on_change in self._subscribers:
                self._subscribers.remove(on_change)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def emit(self, event: AuthEvent, identity: Optional[Identity]) -> None:
        for callback in list(self._subscribers):
            await callback(event, identity)
