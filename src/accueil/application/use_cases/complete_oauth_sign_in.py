"""
Complete OAuth Sign-In use case.
"""

from typing import Optional

from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import (
    ProvisioningOutcome,
    ProvisioningState,
)
from accueil.domain.services.i_identity_provider import IIdentityProvider
from accueil.domain.value_objects.registration_context import (
    RegistrationContext,
)
from accueil.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class CompleteOAuthSignIn:
    """
    Sign in through an external OAuth provider.

    Flow:
    1. begin() returns the provider authorize URL to open
    2. the provider redirects back and the app regains control
    3. complete() establishes the session and provisions
    4. first-time users halt in AWAITING_PROFILE_INPUT until
       submit_profile() supplies the missing details
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        engine: ProvisioningEngine,
        default_provider: str = "google",
        redirect_url: Optional[str] = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            identity_provider: Hosted identity service
            engine: Provisioning engine
            default_provider: OAuth provider used when none is given
            redirect_url: Where the provider sends the user back
        """
        self.identity_provider = identity_provider
        self.engine = engine
        self.default_provider = default_provider
        self.redirect_url = redirect_url

    def begin(
        self,
        provider: Optional[str] = None,
        redirect_to: Optional[str] = None,
    ) -> str:
        """Return the authorize URL for the provider."""
        return self.identity_provider.begin_oauth(
            provider=provider or self.default_provider,
            redirect_to=redirect_to or self.redirect_url,
        )

    async def complete(
        self,
        callback_url: Optional[str] = None,
    ) -> ProvisioningOutcome:
        """
        Finish sign-in after the redirect.

        Args:
            callback_url: Redirect URL carrying the session tokens, if
                the app has it; otherwise the stored session is used

        Returns:
            ProvisioningOutcome (UNAUTHENTICATED when there is no session)

        Raises:
            AuthenticationError: If the redirect carries an error
        """
        if callback_url:
            await self.identity_provider.complete_oauth_redirect(callback_url)

        identity = await self.identity_provider.get_current_session()
        if identity is None:
            logger.info("OAuth completed without a session")
            return ProvisioningOutcome(state=ProvisioningState.UNAUTHENTICATED)

        return await self.engine.provision(identity)

    async def submit_profile(
        self,
        context: RegistrationContext,
    ) -> ProvisioningOutcome:
        """
        Supply the details a first-time OAuth user was asked for.

        Raises:
            ProvisioningStateError: If the engine is not waiting for input
        """
        return await self.engine.submit_profile_context(context)
