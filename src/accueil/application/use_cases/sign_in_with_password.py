"""
Sign In With Password use case.
"""

from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import ProvisioningOutcome
from accueil.domain.services.i_identity_provider import IIdentityProvider


class SignInWithPassword:
    """
    Sign in a returning user and provision on the way in.

    A profile that never got created (confirmation happened after
    signup) is created here from the signup metadata.
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        engine: ProvisioningEngine,
    ):
        self.identity_provider = identity_provider
        self.engine = engine

    async def execute(self, email: str, password: str) -> ProvisioningOutcome:
        """
        Execute password sign-in.

        Args:
            email: Account email
            password: Account password

        Returns:
            ProvisioningOutcome for the signed-in identity

        Raises:
            EmailUnconfirmedError: If the email is not confirmed yet
            InvalidCredentialsError: If email or password is wrong
            IdentityProviderUnavailableError: If sign-in cannot be reached
        """
        identity = await self.identity_provider.sign_in_with_password(
            email=email.strip(),
            password=password,
        )
        return await self.engine.provision(identity)
