"""Unit tests for the pure task authorization rules."""

from __future__ import annotations

import pytest

from tasktracker.services._shared.errors import AuthorizationError
from tasktracker.services._shared.policies import (
    DenialReason,
    TaskSnapshot,
    TeamSnapshot,
    can_assign_task,
    can_mutate_task,
    can_unassign_task,
    validate_team_scoped_assignment,
    validate_team_scoped_creation,
)
from tests.helpers.utils import not_raises

TEAM = TeamSnapshot(id="team-1", owner_id="owner", member_ids=frozenset({"member"}))


def task(*, assignee_id=None, team=None) -> TaskSnapshot:
    return TaskSnapshot(id="task-1", creator_id="creator", assignee_id=assignee_id, team=team)


class TestCanMutateTask:
    @pytest.mark.parametrize("caller", ["creator", "assignee", "owner", "member"])
    def test_participants_allowed(self, caller):
        assert can_mutate_task(caller, task(assignee_id="assignee", team=TEAM))

    def test_outsider_denied(self):
        decision = can_mutate_task("stranger", task(assignee_id="assignee", team=TEAM))

        assert not decision
        assert decision.reason is DenialReason.NOT_TASK_PARTICIPANT

    def test_team_members_have_no_access_to_personal_tasks(self):
        assert not can_mutate_task("member", task())


class TestCanAssignTask:
    @pytest.mark.parametrize("caller", ["creator", "owner", "member"])
    def test_creator_and_team_allowed(self, caller):
        assert can_assign_task(caller, task(assignee_id="assignee", team=TEAM))

    def test_assignee_alone_cannot_reassign(self):
        decision = can_assign_task("assignee", task(assignee_id="assignee"))

        assert decision.reason is DenialReason.NOT_CREATOR_OR_TEAM_MEMBER

    def test_unassign_follows_mutate_rule(self):
        snapshot = task(assignee_id="assignee")
        assert can_unassign_task("assignee", snapshot)
        assert can_unassign_task("stranger", snapshot).reason is DenialReason.NOT_TASK_PARTICIPANT


class TestTeamScopedValidation:
    @pytest.mark.parametrize("candidate", ["owner", "member"])
    def test_team_participants_are_valid_assignees(self, candidate):
        assert validate_team_scoped_assignment(TEAM, candidate)

    def test_outsider_is_not_a_valid_assignee(self):
        decision = validate_team_scoped_assignment(TEAM, "stranger")
        assert decision.reason is DenialReason.ASSIGNEE_NOT_IN_TEAM

    def test_personal_task_accepts_any_assignee(self):
        assert validate_team_scoped_assignment(None, "anyone")
        assert validate_team_scoped_creation(None, "anyone")

    def test_creator_must_belong_to_team(self):
        assert validate_team_scoped_creation(TEAM, "member")
        decision = validate_team_scoped_creation(TEAM, "stranger")
        assert decision.reason is DenialReason.CREATOR_NOT_IN_TEAM

    def test_require_raises_with_reason(self):
        with pytest.raises(AuthorizationError) as excinfo:
            validate_team_scoped_assignment(TEAM, "stranger").require()

        assert excinfo.value.reason is DenialReason.ASSIGNEE_NOT_IN_TEAM
        assert "assignee_not_in_team" in str(excinfo.value)

    def test_require_passes_when_allowed(self):
        with not_raises(AuthorizationError):
            validate_team_scoped_assignment(TEAM, "member").require()
