"""Small assertion helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test if ``exception`` escapes the block.

    Mirrors ``pytest.raises`` for the positive case, e.g. asserting that an
    allowed :class:`Decision` does not raise on ``require()``.

    :param exception: Exception type that must not be raised.
    :type exception: type[BaseException]
    """
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Unexpectedly raised {exception.__name__}: {exc}") from exc
