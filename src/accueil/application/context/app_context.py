"""
Application context - the signed-in user's session state.

Screens read the current identity, profile and wallet from here. It is
created once per process by the DI container and passed to whatever
needs it; nothing reaches it through a module global.
"""

from typing import Optional

from accueil.domain.entities.identity import Identity
from accueil.domain.entities.profile import Profile
from accueil.domain.entities.wallet import Wallet


class ApplicationContext:
    """
    Explicit holder of the current session.

    Lifecycle:
    - init() once provisioning reaches READY for an identity
    - update_wallet() when a missing wallet is healed
    - clear() on sign-out
    """

    def __init__(self):
        self._identity: Optional[Identity] = None
        self._profile: Optional[Profile] = None
        self._wallet: Optional[Wallet] = None
        self._wallet_degraded: bool = False

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    @property
    def wallet(self) -> Optional[Wallet]:
        return self._wallet

    @property
    def wallet_degraded(self) -> bool:
        """True while the profile has no known wallet."""
        return self._wallet_degraded

    @property
    def is_initialized(self) -> bool:
        return self._identity is not None and self._profile is not None

    @property
    def user_id(self) -> Optional[str]:
        return self._identity.id if self._identity else None

    def init(
        self,
        identity: Identity,
        profile: Profile,
        wallet: Optional[Wallet],
        wallet_degraded: bool = False,
    ) -> None:
        """
        Populate the context for a ready user.

        Args:
            identity: Authenticated identity
            profile: Provisioned profile
            wallet: Wallet, or None if it could not be loaded
            wallet_degraded: Whether the wallet still needs repair
        """
        if identity.id != profile.id:
            raise ValueError(
                f"Profile {profile.id} does not belong to identity {identity.id}"
            )

        self._identity = identity
        self._profile = profile
        self._wallet = wallet
        self._wallet_degraded = wallet_degraded

    def update_wallet(self, wallet: Wallet) -> None:
        """Record a wallet loaded or created after init()."""
        if self._identity is None or wallet.user_id != self._identity.id:
            return

        self._wallet = wallet
        self._wallet_degraded = False

    def clear(self) -> None:
        """Forget everything about the signed-in user."""
        self._identity = None
        self._profile = None
        self._wallet = None
        self._wallet_degraded = False
