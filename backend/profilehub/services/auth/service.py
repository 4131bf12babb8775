# profilehub/services/auth/service.py
from __future__ import annotations

import logging

from profilehub.models.user import User
from profilehub.services._shared.base import BaseService, ServiceContext
from profilehub.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
    VersionMismatchError,
)
from profilehub.services._shared.policies.credentials import validate_sign_in, validate_sign_up
from profilehub.services._shared.ports import PasswordHasher, RevocationRegistry, TokenProvider
from profilehub.services.auth.dto import (
    AccessTokenOut,
    AuthSessionOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignUpIn,
)
from profilehub.services.auth.verifier import TokenVerifier
from profilehub.services.identity.dto import UserPublicOut

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (sign-up / sign-in / refresh / sign-out).

    Session rules
    -------------
    - A user holds at most one live refresh token (``User.refresh_token``);
      every sign-in overwrites it.
    - A refresh token is accepted only while it equals the stored one and its
      ``ver`` claim equals ``User.token_version``.
    - Sign-out revokes the presented access token until its own expiry and, for
      an authenticated caller, bumps ``token_version`` and clears the stored
      refresh token.

    Tokens and passwords are never logged; events carry user ids only.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher,
        token_provider: TokenProvider,
        revocations: RevocationRegistry,
        verifier: TokenVerifier | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(password_hasher=password_hasher, ctx=ctx)
        self.tokens = token_provider
        self.revocations = revocations
        self.verifier = verifier or TokenVerifier(
            token_provider=token_provider, revocations=revocations
        )

    # ------------------------------------------------------------------ #
    # Sign-up
    # ------------------------------------------------------------------ #

    def sign_up(self, dto: SignUpIn) -> AuthSessionOut:
        """
        Register a user and open a session for it.

        The existence check and the insert run in separate units of work, so
        two concurrent sign-ups for one email can both pass the check; the
        loser hits ``uq_users_email`` and surfaces as
        :class:`~profilehub.services._shared.errors.DuplicateEmailError`,
        the same 409 as the check itself.

        :raises ValidationError: Malformed input.
        :raises ConflictError: Email already registered.
        """
        validate_sign_up(dto.name, dto.email, dto.password)

        with self.ro_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "User already exists")

        with self.rw_uow() as uow:
            user = uow.users.create(name=dto.name, email=dto.email, password=dto.password)
            session = self._open_session(uow, user)

        logger.info("auth.signup", extra={"user_id": str(session.user.id)})
        return session

    # ------------------------------------------------------------------ #
    # Sign-in
    # ------------------------------------------------------------------ #

    def sign_in(self, dto: SignInIn) -> AuthSessionOut:
        """
        Verify credentials and issue a fresh pair.

        :raises NotFoundError: Unknown email.
        :raises InvalidCredentialsError: Password does not match.
        :raises HashError: The stored hash cannot be checked.
        """
        validate_sign_in(dto.email, dto.password)

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if user is None:
                raise NotFoundError("User", message="User not found")
            if not self._hasher().verify(dto.password, user.password_hash):
                logger.info("auth.signin_failed", extra={"user_id": str(user.id)})
                raise InvalidCredentialsError()
            session = self._open_session(uow, user)

        logger.info("auth.signin", extra={"user_id": str(session.user.id)})
        return session

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh_access_token(self, dto: RefreshIn) -> AccessTokenOut:
        """
        Exchange a refresh token for a new access token.

        The refresh token itself is not rotated.

        :raises ValidationError: No token given.
        :raises InvalidOrExpiredTokenError: Bad signature or expired.
        :raises InvalidTokenError: Unknown user or token no longer stored.
        :raises VersionMismatchError: Sessions were invalidated since issue.
        """
        token = dto.refresh_token
        if not token:
            raise ValidationError("Refresh token is required")

        try:
            claims = self.verifier.verify_refresh_token(token)
        except AuthenticationError as exc:
            raise InvalidOrExpiredTokenError() from exc

        with self.ro_uow() as uow:
            user = uow.users.get(claims.user_id)
            if user is None:
                raise InvalidTokenError("Invalid refresh token")
            # Version first: after sign-out the stored token is also cleared,
            # and the caller should learn that the session was invalidated.
            if claims.version != user.current_token_version:
                raise VersionMismatchError()
            if user.refresh_token != token:
                raise InvalidTokenError("Invalid refresh token")
            user_id = user.id

        access = self.tokens.issue_access_token(user_id)
        logger.info("auth.refresh", extra={"user_id": str(user_id)})
        return AccessTokenOut(access_token=access)

    # ------------------------------------------------------------------ #
    # Sign-out
    # ------------------------------------------------------------------ #

    def sign_out(self, dto: SignOutIn) -> None:
        """
        End the caller's session. Never fails for missing or invalid tokens.

        Calling it twice with the same token is harmless: the second call only
        repeats the revocation, and the guard no longer resolves a user.
        """
        token = dto.access_token
        if not token:
            logger.info("auth.signout", extra={"user_id": None, "revoked": False})
            return

        expires_at = self.tokens.peek_expiry(token)
        if expires_at is not None:
            self.revocations.revoke(token, float(expires_at))

        try:
            self.tokens.decode_access_token(token)
        except AuthenticationError as exc:
            logger.debug("auth.signout.undecodable", extra={"reason": exc.code})
            return

        if dto.user_id is not None:
            with self.rw_uow() as uow:
                user = uow.users.get(dto.user_id)
                if user is not None:
                    user.token_version = user.current_token_version + 1
                    user.refresh_token = None
                    uow.users.save(user)

        logger.info("auth.signout", extra={"user_id": dto.user_id, "revoked": True})

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _hasher(self) -> PasswordHasher:
        if self.hasher is None:
            raise RuntimeError("AuthService requires a PasswordHasher")
        return self.hasher

    def _open_session(self, uow, user: User) -> AuthSessionOut:
        """Issue a pair for ``user`` and store the refresh token (single active)."""
        access = self.tokens.issue_access_token(user.id)
        refresh = self.tokens.issue_refresh_token(user.id, user.current_token_version)
        user.refresh_token = refresh
        uow.users.save(user)
        return AuthSessionOut(
            access_token=access,
            refresh_token=refresh,
            user=UserPublicOut.from_model(user),
        )
