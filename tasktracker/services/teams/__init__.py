"""Team service layer: lifecycle and membership."""

from __future__ import annotations

from .dto import TeamCreateIn, TeamOut, TeamUpdateIn
from .service import TeamService

__all__ = ["TeamCreateIn", "TeamOut", "TeamService", "TeamUpdateIn"]
