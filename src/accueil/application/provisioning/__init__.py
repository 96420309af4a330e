"""
Provisioning state machine.
"""

from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import (
    TERMINAL_STATES,
    TRANSITIONS,
    ErrorKind,
    ProvisioningError,
    ProvisioningOutcome,
    ProvisioningState,
    check_transition,
)

__all__ = [
    "ProvisioningEngine",
    "ProvisioningState",
    "ProvisioningOutcome",
    "ProvisioningError",
    "ErrorKind",
    "TRANSITIONS",
    "TERMINAL_STATES",
    "check_transition",
]
