"""Authentication lifecycle: sign-up, sign-in, refresh and sign-out."""

from .dto import (
    AccessTokenOut,
    AuthSessionOut,
    AuthTokenConfig,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
)
from .service import AuthService
from .verifier import TokenVerifier

__all__ = [
    "AccessTokenOut",
    "AuthService",
    "AuthSessionOut",
    "AuthTokenConfig",
    "RefreshIn",
    "SignInIn",
    "SignOutIn",
    "SignUpIn",
    "TokenVerifier",
]
