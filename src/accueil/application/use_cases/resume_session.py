"""
Resume Session use case.
"""

from typing import Optional

from accueil.application.context.app_context import ApplicationContext
from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import (
    ProvisioningOutcome,
    ProvisioningState,
)
from accueil.domain.entities.identity import Identity
from accueil.domain.services.i_identity_provider import (
    AuthEvent,
    IIdentityProvider,
    Unsubscribe,
)
from accueil.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class ResumeSession:
    """
    Keep provisioning in step with the identity provider's session.

    Business rules:
    - start() resumes once, then follows auth events
    - Every SIGNED_IN re-enters provisioning for that identity
    - SIGNED_OUT clears the application context and resets the engine
    - Safe to call repeatedly; the engine makes repeated runs harmless
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        engine: ProvisioningEngine,
        app_context: ApplicationContext,
    ):
        """
        Initialize use case with dependencies.

        Args:
            identity_provider: Hosted identity service
            engine: Provisioning engine
            app_context: Session state cleared on sign-out
        """
        self.identity_provider = identity_provider
        self.engine = engine
        self.app_context = app_context
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def is_listening(self) -> bool:
        return self._unsubscribe is not None

    async def start(self) -> ProvisioningOutcome:
        """Resume the stored session and subscribe to auth events."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity_provider.subscribe(
                self._on_auth_change
            )
        return await self.resume()

    async def resume(self) -> ProvisioningOutcome:
        """
        Provision for the stored session, if any.

        Returns:
            ProvisioningOutcome (UNAUTHENTICATED when there is no session)
        """
        identity = await self.identity_provider.get_current_session()
        if identity is None:
            return ProvisioningOutcome(state=ProvisioningState.UNAUTHENTICATED)

        return await self.engine.provision(identity)

    def stop(self) -> None:
        """Stop following auth events."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _on_auth_change(
        self,
        event: AuthEvent,
        identity: Optional[Identity],
    ) -> None:
        if event is AuthEvent.SIGNED_OUT:
            logger.info("Signed out, clearing session state")
            self.app_context.clear()
            self.engine.reset()
            return

        if event is AuthEvent.SIGNED_IN and identity is not None:
            await self.engine.provision(identity)
