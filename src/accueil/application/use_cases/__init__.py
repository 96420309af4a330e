"""Application use cases."""

from accueil.application.use_cases.complete_oauth_sign_in import (
    CompleteOAuthSignIn,
)
from accueil.application.use_cases.ensure_wallet import EnsureWallet
from accueil.application.use_cases.register_with_password import (
    RegisterWithPassword,
    RegistrationResult,
    RegistrationStatus,
)
from accueil.application.use_cases.resume_session import ResumeSession
from accueil.application.use_cases.sign_in_with_password import (
    SignInWithPassword,
)
from accueil.application.use_cases.sign_out import SignOut

__all__ = [
    "RegisterWithPassword",
    "RegistrationResult",
    "RegistrationStatus",
    "SignInWithPassword",
    "CompleteOAuthSignIn",
    "ResumeSession",
    "SignOut",
    "EnsureWallet",
]
