# tasktracker/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from http import HTTPStatus

from sqlalchemy.exc import IntegrityError

from tasktracker.services._shared.deadline import NO_DEADLINE, Deadline
from tasktracker.services._shared.dto import ProblemDetails
from tasktracker.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    OperationTimeoutError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
    violates,
)
from tasktracker.services._shared.policies import Operation, TaskSnapshot, TeamSnapshot, authorize
from tasktracker.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

logger = logging.getLogger(__name__)

# (error type, status, stable code); first match wins, so subclasses go first.
_PROBLEM_MAP: tuple[tuple[type[ServiceError], int, str], ...] = (
    (UnauthorizedError, 401, "unauthorized"),
    (AuthorizationError, 403, "forbidden"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (ValidationError, 422, "unprocessable_entity"),
    (OperationTimeoutError, 504, "deadline_exceeded"),
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Evaluate authorization rules and raise on denial.
    * Centralize error translation to problem details.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - Every call acting on behalf of a caller receives the caller's
      :class:`~tasktracker.services._shared.claims.Claims` explicitly.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self, *, deadline: Deadline | None = None) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :param deadline: Checked again right before commit.
        :type deadline: Deadline | None
        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(deadline=deadline)

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    @staticmethod
    def deadline_or_default(deadline: Deadline | None) -> Deadline:
        return deadline or NO_DEADLINE

    # --------------------------- AuthZ --------------------------------

    def ensure_allowed(
        self,
        operation: Operation,
        caller_id: str,
        snapshot: TaskSnapshot | TeamSnapshot,
        *,
        target_id: str | None = None,
        message: str | None = None,
    ) -> None:
        """
        Evaluate ``operation`` for ``caller_id`` and raise when denied.

        :param operation: Operation kind.
        :type operation: Operation
        :param caller_id: Identity id from verified claims.
        :type caller_id: str
        :param snapshot: Read-only view of the target resource.
        :type snapshot: TaskSnapshot | TeamSnapshot
        :param target_id: Assignee or member id, when the operation has one.
        :type target_id: str | None
        :param message: Optional human-readable message for the error.
        :type message: str | None
        :raises AuthorizationError: When the rule denies the operation.
        """
        authorize(operation, caller_id, snapshot, target_id=target_id).require(message)

    # ----------------------- Validation utilities ---------------------------

    @contextmanager
    def model_validation(self, entity: str) -> Iterator[None]:
        """
        Turn model validator failures into :class:`ValidationError`.

        Also maps unique-email violations raised while flushing to a
        :class:`ConflictError` on ``entity``.
        """
        try:
            yield
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        except IntegrityError as exc:
            if violates(exc, "uq_users_email"):
                raise ConflictError(entity, "email already in use") from exc
            raise

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> ProblemDetails | Exception:
        """
        Map service-level errors to RFC 7807 problem details.

        Authorization denials expose their machine-readable ``reason``;
        unauthorized problems always carry the same generic detail.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Problem details, or ``exc`` untouched when it is not a service error.
        :rtype: ProblemDetails | Exception
        """
        if not isinstance(exc, ServiceError):
            return exc

        status, code = 400, "bad_request"
        for error_type, mapped_status, mapped_code in _PROBLEM_MAP:
            if isinstance(exc, error_type):
                status, code = mapped_status, mapped_code
                break

        extra: dict[str, object] = {"code": code}
        detail = str(exc)
        if isinstance(exc, UnauthorizedError):
            detail = UnauthorizedError.GENERIC_MESSAGE
        elif isinstance(exc, AuthorizationError) and exc.reason is not None:
            extra["reason"] = exc.reason.value

        return ProblemDetails(
            type="about:blank",
            title=HTTPStatus(status).phrase,
            status=status,
            detail=detail,
            extra=extra,
        )
