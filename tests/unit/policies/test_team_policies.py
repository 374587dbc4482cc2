"""Unit tests for the pure team authorization rules."""

from __future__ import annotations

from tasktracker.services._shared.policies import (
    DenialReason,
    TeamSnapshot,
    can_add_member,
    can_leave_team,
    can_manage_team,
    can_remove_member,
    can_view_team,
    has_team_access,
)

TEAM = TeamSnapshot(id="team-1", owner_id="owner", member_ids=frozenset({"m1", "m2"}))


def test_only_owner_manages():
    assert can_manage_team("owner", TEAM)
    assert can_manage_team("m1", TEAM).reason is DenialReason.NOT_TEAM_OWNER
    assert can_manage_team("stranger", TEAM).reason is DenialReason.NOT_TEAM_OWNER


def test_owner_is_never_removable():
    assert can_remove_member(TEAM, "owner").reason is DenialReason.OWNER_NOT_REMOVABLE


def test_remove_requires_membership():
    assert can_remove_member(TEAM, "m1")
    assert can_remove_member(TEAM, "stranger").reason is DenialReason.NOT_A_MEMBER


def test_add_rejects_existing_member():
    assert can_add_member(TEAM, "stranger")
    assert can_add_member(TEAM, "m2").reason is DenialReason.ALREADY_MEMBER


def test_leave():
    assert can_leave_team("m1", TEAM)
    assert can_leave_team("owner", TEAM).reason is DenialReason.OWNER_NOT_REMOVABLE
    assert can_leave_team("stranger", TEAM).reason is DenialReason.NOT_A_MEMBER


def test_view_requires_access():
    assert can_view_team("owner", TEAM)
    assert can_view_team("m2", TEAM)
    assert can_view_team("stranger", TEAM).reason is DenialReason.NOT_TEAM_PARTICIPANT


def test_access_helpers():
    assert has_team_access("owner", TEAM)
    assert not has_team_access("owner", None)
    assert not has_team_access(None, TEAM)
    assert TEAM.is_owner("owner")
    assert not TEAM.is_owner(None)
