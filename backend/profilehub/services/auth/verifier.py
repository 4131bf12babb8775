# profilehub/services/auth/verifier.py
from __future__ import annotations

from profilehub.services._shared.errors import RevokedTokenError
from profilehub.services._shared.ports import RevocationRegistry, TokenClaims, TokenProvider


class TokenVerifier:
    """
    Validate presented tokens.

    Access tokens are checked for signature and expiry first (stateless), then
    against the revocation registry. Refresh tokens are only checked for
    signature and expiry; version and store match need the user row and are
    left to :class:`~profilehub.services.auth.service.AuthService`.

    :param token_provider: Adapter decoding JWTs.
    :param revocations: Registry of access tokens revoked before expiry.
    """

    def __init__(self, *, token_provider: TokenProvider, revocations: RevocationRegistry) -> None:
        self.tokens = token_provider
        self.revocations = revocations

    def verify_access_token(self, token: str) -> TokenClaims:
        """
        :raises InvalidTokenError: Bad signature, type or shape.
        :raises ExpiredTokenError: Token past its ``exp``.
        :raises RevokedTokenError: Token revoked by sign-out.
        """
        claims = self.tokens.decode_access_token(token)
        if self.revocations.is_revoked(token):
            raise RevokedTokenError()
        return claims

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self.tokens.decode_refresh_token(token)
