"""
IdentityService
===============

Service responsible for the `User` aggregate outside the token lifecycle:
- Profile reads and updates (names, email)
- Password changes
- Soft deactivation
"""

from __future__ import annotations

import logging

from tasktracker.repositories.user import UserRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.claims import Claims
from tasktracker.services._shared.deadline import Deadline
from tasktracker.services._shared.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tasktracker.services._shared.ports import PasswordHasher

from ._converters import user_to_public
from .dto import PasswordChangeIn, UserPublicOut, UserUpdateIn

logger = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Profile mutations always target the caller (``claims.subject_id``);
    there is no way to edit another identity through this service.
    """

    def __init__(self, *, password_hasher: PasswordHasher) -> None:
        self.hasher = password_hasher

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: str) -> UserPublicOut:
        """
        Retrieve an active identity by id.

        :param user_id: Identity id.
        :type user_id: str
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If the identity is missing or inactive.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return user_to_public(user)

    def get_user_by_email(self, email: str) -> UserPublicOut:
        """
        Retrieve an active identity by (case-insensitive) email.

        :raises NotFoundError: If no active identity uses that email.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None or not user.is_active:
                raise NotFoundError("User", email)
            return user_to_public(user)

    # --------------------------------------------------------------------- #
    # Updates
    # --------------------------------------------------------------------- #

    def update_user(
        self, claims: Claims, dto: UserUpdateIn, *, deadline: Deadline | None = None
    ) -> UserPublicOut:
        """
        Update the caller's profile fields.

        :param claims: Verified caller claims.
        :type claims: Claims
        :param dto: Fields to change.
        :type dto: UserUpdateIn
        :param deadline: Optional operation deadline.
        :type deadline: Deadline | None
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: When the caller's identity is gone.
        :raises ConflictError: When the new email is already in use.
        :raises ValidationError: When a value is rejected by the model.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("load_user")
            user = repo.get_active(claims.subject_id, for_update=True)
            if user is None:
                raise NotFoundError("User", claims.subject_id)

            updates = {
                k: v
                for k, v in {
                    "first_name": dto.first_name,
                    "last_name": dto.last_name,
                    "email": dto.email,
                }.items()
                if v is not None
            }
            if "email" in updates:
                deadline.check("check_email")
                other = repo.get_by_email(updates["email"])
                if other is not None and other.id != user.id:
                    raise ConflictError("User", "email already in use")

            deadline.check("update_user")
            with self.model_validation("User"):
                repo.update(user, **updates)

            logger.info("User updated", extra={"user_id": user.id, "fields": sorted(updates)})
            return user_to_public(user)

    def change_password(
        self, claims: Claims, dto: PasswordChangeIn, *, deadline: Deadline | None = None
    ) -> None:
        """
        Change the caller's password after verifying the current one.

        The stored refresh token is cleared so other sessions must log in again.

        :raises UnauthorizedError: When the current password does not verify.
        :raises ValidationError: When the new password is empty.
        """
        if not dto.new_password:
            raise ValidationError("New password is required.")

        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("load_user")
            user = repo.get_active(claims.subject_id, for_update=True)
            if user is None:
                raise NotFoundError("User", claims.subject_id)

            if not self.hasher.verify(dto.old_password, user.password_hash):
                logger.info("Password change rejected", extra={"user_id": user.id})
                raise UnauthorizedError()

            deadline.check("store_password")
            user.password_hash = self.hasher.hash(dto.new_password)
            repo.clear_refresh_token(user)
            logger.info("Password changed", extra={"user_id": user.id})

    def deactivate_user(self, claims: Claims, *, deadline: Deadline | None = None) -> None:
        """
        Soft-delete the caller: status becomes ``Inactive`` and the refresh
        credential is dropped, so neither login nor refresh succeeds afterwards.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            repo: UserRepository = uow.users
            deadline.check("load_user")
            user = repo.get_active(claims.subject_id, for_update=True)
            if user is None:
                raise NotFoundError("User", claims.subject_id)

            deadline.check("deactivate_user")
            repo.clear_refresh_token(user)
            repo.delete(user)
            logger.info("User deactivated", extra={"user_id": user.id})
