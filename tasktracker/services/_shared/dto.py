# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ProblemDetails:
    """
    RFC 7807 problem details.

    :param type: URI reference that identifies the problem type.
    :type type: str
    :param title: Short, human-readable summary of the problem.
    :type title: str
    :param status: HTTP-style status code.
    :type status: int
    :param detail: Human-readable explanation.
    :type detail: str | None
    :param instance: URI reference that identifies the specific occurrence.
    :type instance: str | None
    :param extra: Optional extension members (e.g. the denial ``reason``).
    :type extra: dict[str, Any] | None
    """

    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    extra: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a JSON-ready mapping (extension members inlined)."""
        body: dict[str, Any] = {"type": self.type, "title": self.title, "status": self.status}
        if self.detail is not None:
            body["detail"] = self.detail
        if self.instance is not None:
            body["instance"] = self.instance
        if self.extra:
            body.update(self.extra)
        return body
