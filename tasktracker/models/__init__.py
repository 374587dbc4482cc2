from tasktracker.models.base import EntityStatus
from tasktracker.models.task import Priority, Task
from tasktracker.models.team import Team, team_members
from tasktracker.models.user import User

__all__ = [
    "EntityStatus",
    "Priority",
    "Task",
    "Team",
    "User",
    "team_members",
]
