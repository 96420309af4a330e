"""
Provisioning state machine exceptions.
"""

from accueil.domain.exceptions.base import AccueilException


class ProvisioningStateError(AccueilException):
    """Raised when a presentation action is not valid in the current state."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(
            f"Cannot {action} while provisioning is {state}",
            code="PROVISIONING_STATE_ERROR",
        )


class InvalidStateTransitionError(AccueilException):
    """Raised when a run attempts a transition the state machine forbids."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid provisioning transition: {current} -> {target}",
            code="INVALID_STATE_TRANSITION",
        )
