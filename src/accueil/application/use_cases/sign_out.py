"""
Sign Out use case.
"""

from accueil.domain.services.i_identity_provider import IIdentityProvider


class SignOut:
    """
    Sign out the current user.

    The SIGNED_OUT event clears the application context through the
    ResumeSession subscription.
    """

    def __init__(self, identity_provider: IIdentityProvider):
        self.identity_provider = identity_provider

    async def execute(self) -> None:
        """Execute sign-out."""
        await self.identity_provider.sign_out()
