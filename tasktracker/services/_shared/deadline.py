"""Caller-supplied deadline and cancellation token for service operations."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tasktracker.services._shared.errors import OperationTimeoutError


@dataclass(frozen=True, slots=True)
class Deadline:
    """
    Point in (monotonic) time after which an operation must stop.

    Services call :meth:`check` before every store round-trip and right before
    committing. Because the check raises inside the Unit of Work, an expired
    deadline rolls the transaction back and leaves no partial state.

    :param expires_at: Monotonic timestamp, or ``None`` for no time limit.
    :type expires_at: float | None
    :param cancel_event: Optional event a caller sets to cancel the operation.
    :type cancel_event: threading.Event | None
    :param clock: Monotonic clock (injectable for tests).
    :type clock: Callable[[], float]
    """

    expires_at: float | None = None
    cancel_event: threading.Event | None = None
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def none(cls) -> Deadline:
        """Return a deadline that never expires."""
        return cls()

    @classmethod
    def after(
        cls,
        seconds: float,
        *,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> Deadline:
        """Return a deadline ``seconds`` from now according to ``clock``."""
        return cls(expires_at=clock() + seconds, cancel_event=cancel_event, clock=clock)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        """``True`` once cancelled or past ``expires_at``."""
        if self.cancelled:
            return True
        return self.expires_at is not None and self.clock() >= self.expires_at

    def remaining(self) -> float | None:
        """Seconds left (never negative), or ``None`` when unbounded."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self.clock())

    def check(self, stage: str) -> None:
        """
        Raise when the deadline has passed or the caller cancelled.

        :param stage: Short label identifying where the check happened.
        :type stage: str
        :raises OperationTimeoutError: When expired or cancelled.
        """
        if self.expired:
            raise OperationTimeoutError(stage)


NO_DEADLINE = Deadline.none()
