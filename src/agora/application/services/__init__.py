from agora.application.services.account_token_service import AccountTokenService
from agora.application.services.authentication_service import (
    AttemptPolicy,
    AuthenticationService,
    normalize_email,
)

__all__ = [
    "AccountTokenService",
    "AttemptPolicy",
    "AuthenticationService",
    "normalize_email",
]
