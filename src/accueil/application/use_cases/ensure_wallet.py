"""
Ensure Wallet use case.
"""

from typing import Optional

from accueil.application.context.app_context import ApplicationContext
from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.domain.entities.wallet import Wallet
from accueil.domain.exceptions import ValidationError


class EnsureWallet:
    """
    Load the current user's wallet, creating it if it went missing.

    Business rules:
    - Creates a 0.00 wallet only when none exists
    - Never creates a second wallet
    """

    def __init__(
        self,
        engine: ProvisioningEngine,
        app_context: ApplicationContext,
    ):
        """
        Initialize use case with dependencies.

        Args:
            engine: Provisioning engine (owns wallet healing)
            app_context: Current session state
        """
        self.engine = engine
        self.app_context = app_context

    async def execute(self, user_id: Optional[str] = None) -> Wallet:
        """
        Execute wallet load.

        Args:
            user_id: Profile id (defaults to the signed-in user)

        Returns:
            The user's wallet

        Raises:
            ValidationError: If no user is given or signed in
            EntityNotFoundError: If the user has no profile
            NetworkError: If the record store cannot be reached
        """
        user_id = user_id or self.app_context.user_id
        if not user_id:
            raise ValidationError(field="user_id", reason="No signed-in user")

        return await self.engine.ensure_wallet(user_id)
