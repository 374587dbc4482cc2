# tasktracker/services/auth/service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import NoReturn

from tasktracker.models.user import User
from tasktracker.repositories.user import UserRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.claims import Claims
from tasktracker.services._shared.deadline import Deadline
from tasktracker.services._shared.errors import (
    ConflictError,
    NotFoundError,
    TokenError,
    UnauthorizedError,
    ValidationError,
)
from tasktracker.services._shared.ports import PasswordHasher, TokenProvider
from tasktracker.services.identity._converters import user_to_public

from .dto import LoginIn, RefreshIn, RegisterIn, TokenPairOut

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens are stateless and validated by signature and claims only.
    The single valid refresh token of an identity is stored (as a digest) on
    the identity row; issuing a new one overwrites the previous, so rotation
    invalidates the presented token immediately.
    """

    def __init__(self, *, token_provider: TokenProvider, password_hasher: PasswordHasher) -> None:
        """
        :param token_provider: Adapter issuing refresh tokens and issuing/validating JWTs.
        :param password_hasher: Adapter hashing and verifying passwords.
        """
        self.tokens = token_provider
        self.hasher = password_hasher

    # ------------------------------------------------------------------ #
    # Registration / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Create an identity and issue its first token pair.

        :param dto: Registration input.
        :type dto: RegisterIn
        :param deadline: Optional operation deadline.
        :type deadline: Deadline | None
        :returns: Token pair for the new identity.
        :rtype: TokenPairOut
        :raises ConflictError: If the email is already registered.
        :raises ValidationError: If a field is rejected by the model.
        """
        if not dto.password:
            raise ValidationError("Password is required.")

        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("check_email")
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")

            deadline.check("create_user")
            with self.model_validation("User"):
                user = User(
                    email=dto.email,
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    password_hash=self.hasher.hash(dto.password),
                )
                repo.add(user)

            pair = self._issue_and_store(repo, user, deadline)
            logger.info("User registered", extra={"user_id": user.id})
            return pair

    def login(self, dto: LoginIn, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Verify credentials and issue a new token pair.

        Unknown email, inactive identity and wrong password are all reported
        as the same :class:`UnauthorizedError`.

        :param dto: Login input.
        :type dto: LoginIn
        :returns: Access/refresh token pair.
        :rtype: TokenPairOut
        :raises UnauthorizedError: If credentials are invalid.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("resolve_identity")
            user = repo.get_by_email(dto.email, for_update=True) if dto.email else None
            if user is None or not user.is_active:
                logger.info("Login rejected", extra={"stage": "resolve_identity"})
                raise UnauthorizedError()
            if not self.hasher.verify(dto.password, user.password_hash):
                logger.info("Login rejected", extra={"stage": "verify_password", "user_id": user.id})
                raise UnauthorizedError()

            pair = self._issue_and_store(repo, user, deadline)
            logger.info("User logged in", extra={"user_id": user.id})
            return pair

    def issue_token_pair(self, user_id: str, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Issue a token pair for an existing active identity.

        The new refresh token overwrites whatever was stored before.

        :param user_id: Identity id.
        :type user_id: str
        :returns: Token pair.
        :rtype: TokenPairOut
        :raises NotFoundError: If the identity is missing or inactive.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("resolve_identity")
            user = repo.get_active(user_id, for_update=True)
            if user is None:
                raise NotFoundError("User", user_id)
            return self._issue_and_store(repo, user, deadline)

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Rotate the refresh token and emit a new token pair.

        Stages run in a fixed order (extract claims, resolve identity,
        validate refresh token, rotate) so that signature problems never
        reach the store. Every failure surfaces as the same
        :class:`UnauthorizedError`; the failing stage is only logged.

        :param dto: Expired access token plus its refresh token.
        :type dto: RefreshIn
        :param deadline: Optional operation deadline.
        :type deadline: Deadline | None
        :returns: New token pair.
        :rtype: TokenPairOut
        :raises UnauthorizedError: On any validation or rotation failure.
        :raises OperationTimeoutError: If the deadline expires; nothing is written.
        """
        deadline = self.deadline_or_default(deadline)

        # 1) ExtractClaims: signature/issuer/audience only, lifetime ignored.
        try:
            claims = self.tokens.validate(dto.access_token, require_unexpired=False)
        except TokenError as exc:
            self._reject("extract_claims", reason=type(exc).__name__)

        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users

            # 2) ResolveIdentity
            deadline.check("resolve_identity")
            user = repo.get_by_email(claims.email, for_update=True)
            if user is None or user.id != claims.subject_id or not user.is_active:
                self._reject("resolve_identity", subject_id=claims.subject_id)

            # 3) ValidateRefreshToken: stored state is left untouched on mismatch.
            now = self.now_utc()
            if not user.refresh_token_matches(dto.refresh_token, now):
                self._reject("validate_refresh_token", user_id=user.id)

            # 4) Rotate: compare-and-swap on the presented value.
            deadline.check("rotate")
            access = self.tokens.issue_access_token(user, now=now)
            refresh = self.tokens.issue_refresh_token(now=now)
            swapped = repo.rotate_refresh_token(
                user.id,
                presented=dto.refresh_token,
                new_token=refresh.token,
                new_expires_at=refresh.expires_at,
                now=now,
            )
            if not swapped:
                logger.warning(
                    "Refresh rejected",
                    extra={"stage": "rotate", "user_id": user.id, "reason": "concurrent_rotation"},
                )
                raise UnauthorizedError()

            logger.info("Refresh token rotated", extra={"user_id": user.id})
            return self._pair_out(user, access.token, access.expires_at, refresh.token, refresh.expires_at)

    # ------------------------------------------------------------------ #
    # Logout / gateway check
    # ------------------------------------------------------------------ #

    def logout(self, claims: Claims, *, deadline: Deadline | None = None) -> None:
        """
        Drop the caller's stored refresh token.

        Already-issued access tokens stay valid until they expire.
        Idempotent: logging out twice is not an error.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("resolve_identity")
            user = repo.get_for_update(claims.subject_id)
            if user is None:
                return
            repo.clear_refresh_token(user)
            logger.info("User logged out", extra={"user_id": user.id})

    def authenticate(self, access_token: str) -> Claims:
        """
        Validate an access token for a request (lifetime enforced).

        :param access_token: Encoded access token.
        :type access_token: str
        :returns: Verified caller claims.
        :rtype: Claims
        :raises UnauthorizedError: For any token problem.
        """
        try:
            return self.tokens.validate(access_token, require_unexpired=True)
        except TokenError as exc:
            logger.info("Access token rejected", extra={"reason": type(exc).__name__})
            raise UnauthorizedError() from exc

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_and_store(self, repo: UserRepository, user: User, deadline: Deadline) -> TokenPairOut:
        now = self.now_utc()
        access = self.tokens.issue_access_token(user, now=now)
        refresh = self.tokens.issue_refresh_token(now=now)
        deadline.check("store_refresh_token")
        repo.store_refresh_token(user, refresh.token, refresh.expires_at)
        return self._pair_out(user, access.token, access.expires_at, refresh.token, refresh.expires_at)

    @staticmethod
    def _pair_out(
        user: User,
        access_token: str,
        access_expires_at: datetime,
        refresh_token: str,
        refresh_expires_at: datetime,
    ) -> TokenPairOut:
        return TokenPairOut(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
            user=user_to_public(user),
        )

    @staticmethod
    def _reject(stage: str, **fields: object) -> NoReturn:
        logger.info("Refresh rejected", extra={"stage": stage, **fields})
        raise UnauthorizedError()
