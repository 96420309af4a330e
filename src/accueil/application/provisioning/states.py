"""
Provisioning states, transitions and outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from accueil.domain.entities.profile import Profile
from accueil.domain.entities.wallet import Wallet
from accueil.domain.exceptions.provisioning import InvalidStateTransitionError


class ProvisioningState(str, Enum):
    """States of the provisioning state machine."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    AWAITING_EMAIL_CONFIRMATION = "awaiting_email_confirmation"
    CHECKING_PROFILE = "checking_profile"
    PROFILE_FOUND = "profile_found"
    PROFILE_MISSING = "profile_missing"
    AWAITING_PROFILE_INPUT = "awaiting_profile_input"
    CREATING_PROFILE = "creating_profile"
    CREATING_WALLET = "creating_wallet"
    READY = "ready"
    ERROR = "error"


S = ProvisioningState

TRANSITIONS: dict[ProvisioningState, frozenset[ProvisioningState]] = {
    S.UNAUTHENTICATED: frozenset({S.AUTHENTICATED}),
    S.AUTHENTICATED: frozenset({S.CHECKING_PROFILE, S.AWAITING_EMAIL_CONFIRMATION}),
    S.CHECKING_PROFILE: frozenset({S.PROFILE_FOUND, S.PROFILE_MISSING}),
    S.PROFILE_MISSING: frozenset({S.CREATING_PROFILE, S.AWAITING_PROFILE_INPUT}),
    # DuplicateKeyError on insert collapses into PROFILE_FOUND
    S.CREATING_PROFILE: frozenset({S.CREATING_WALLET, S.PROFILE_FOUND}),
    S.CREATING_WALLET: frozenset({S.READY}),
    S.PROFILE_FOUND: frozenset({S.READY}),
    S.READY: frozenset(),
    S.AWAITING_PROFILE_INPUT: frozenset(),
    S.AWAITING_EMAIL_CONFIRMATION: frozenset(),
    S.ERROR: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)


def check_transition(current: ProvisioningState, target: ProvisioningState) -> None:
    """
    Validate a transition.

    ERROR is reachable from every non-terminal state.

    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if target is S.ERROR and current not in TERMINAL_STATES:
        return

    if target not in TRANSITIONS[current]:
        raise InvalidStateTransitionError(current.value, target.value)


class ErrorKind(str, Enum):
    """User-facing error categories."""

    VALIDATION = "validation"
    NETWORK = "network"
    CONSTRAINT = "constraint"
    EMAIL_UNCONFIRMED = "email_unconfirmed"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ProvisioningError:
    """
    Error surfaced to the presentation layer.

    Attributes:
        kind: Error category
        message: Message safe to show the user
        recoverable: Whether retry() may be offered
    """

    kind: ErrorKind
    message: str
    recoverable: bool


@dataclass(frozen=True)
class ProvisioningOutcome:
    """
    Result of one provisioning run (also the presentation snapshot).

    Attributes:
        state: Terminal (or, for snapshots, current) state
        identity_id: Identity the run was for
        profile: Profile when READY
        wallet: Wallet when known
        wallet_degraded: Profile exists but wallet is missing or unknown
        missing_fields: Fields to ask for in AWAITING_PROFILE_INPUT
        error: Last error, if any
        suggested_name: Provider display name to prefill a form with
    """

    state: ProvisioningState
    identity_id: Optional[str] = None
    profile: Optional[Profile] = None
    wallet: Optional[Wallet] = None
    wallet_degraded: bool = False
    missing_fields: tuple[str, ...] = field(default_factory=tuple)
    error: Optional[ProvisioningError] = None
    suggested_name: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.state is ProvisioningState.READY
