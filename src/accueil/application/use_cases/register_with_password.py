"""
Register With Password use case.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from accueil.application.provisioning.engine import ProvisioningEngine
from accueil.application.provisioning.states import ProvisioningOutcome
from accueil.domain.entities.identity import Identity
from accueil.domain.exceptions import ValidationError
from accueil.domain.services.i_identity_provider import IIdentityProvider
from accueil.domain.value_objects.registration_context import (
    RegistrationContext,
)
from accueil.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


class RegistrationStatus(str, Enum):
    """How a registration attempt ended."""

    CONFIRMATION_REQUIRED = "confirmation_required"
    PROVISIONED = "provisioned"


@dataclass(frozen=True)
class RegistrationResult:
    """
    Result of a registration attempt.

    outcome is None while the confirmation email is pending; the
    account is provisioned once the user confirms and signs in.
    """

    status: RegistrationStatus
    identity: Identity
    outcome: Optional[ProvisioningOutcome] = None


class RegisterWithPassword:
    """
    Register a student with email, password and profile details.

    Business rules:
    - Registration details are validated before any signup call
    - Details travel with the signup as user metadata
    - Unconfirmed email stops here (confirmation email was sent)
    - Otherwise the engine provisions with the full details
    """

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        engine: ProvisioningEngine,
    ):
        """
        Initialize use case with dependencies.

        Args:
            identity_provider: Hosted identity service
            engine: Provisioning engine
        """
        self.identity_provider = identity_provider
        self.engine = engine

    async def execute(
        self,
        email: str,
        password: str,
        context: RegistrationContext,
    ) -> RegistrationResult:
        """
        Execute registration.

        Args:
            email: Account email
            password: Account password
            context: Registration form data

        Returns:
            RegistrationResult

        Raises:
            ValidationError: If details are incomplete or invalid
            EmailInUseError: If the email is already registered
            InvalidCredentialsError: If the provider rejects the input
            IdentityProviderUnavailableError: If signup cannot be reached
        """
        if not email or not email.strip():
            raise ValidationError(field="email", reason="Email is required")
        if not password:
            raise ValidationError(field="password", reason="Password is required")

        # 1. Validate before touching the identity provider
        context.validate()

        # 2. Sign up, carrying the details as metadata
        identity = await self.identity_provider.sign_up_with_password(
            email=email.strip(),
            password=password,
            metadata=context.to_metadata(),
        )

        # 3. Confirmation pending: nothing to provision yet
        if not identity.email_verified and identity.confirmation_sent:
            logger.info(
                "Signup awaiting email confirmation",
                extra={"extra": {"identity_id": identity.id}},
            )
            return RegistrationResult(
                status=RegistrationStatus.CONFIRMATION_REQUIRED,
                identity=identity,
            )

        # 4. Provision with the full details
        outcome = await self.engine.provision(identity, context)
        return RegistrationResult(
            status=RegistrationStatus.PROVISIONED,
            identity=identity,
            outcome=outcome,
        )
