"""Team membership and management rules."""

from __future__ import annotations

from .decisions import ALLOW, Decision, DenialReason
from .snapshots import TeamSnapshot


def can_remove_member(team: TeamSnapshot, target_id: str) -> Decision:
    """The owner is never removable through member removal; others must be members."""
    if team.is_owner(target_id):
        return Decision.deny(DenialReason.OWNER_NOT_REMOVABLE)
    if not team.is_member(target_id):
        return Decision.deny(DenialReason.NOT_A_MEMBER)
    return ALLOW


def can_add_member(team: TeamSnapshot, candidate_id: str) -> Decision:
    if team.is_member(candidate_id):
        return Decision.deny(DenialReason.ALREADY_MEMBER)
    return ALLOW


def can_manage_team(caller_id: str, team: TeamSnapshot) -> Decision:
    """Rename, transfer, replace members, add/remove members, delete: owner only."""
    if team.is_owner(caller_id):
        return ALLOW
    return Decision.deny(DenialReason.NOT_TEAM_OWNER)


def can_leave_team(caller_id: str, team: TeamSnapshot) -> Decision:
    """A member may remove themselves; the owner must transfer ownership first."""
    return can_remove_member(team, caller_id)


def can_view_team(caller_id: str, team: TeamSnapshot) -> Decision:
    if team.has_access(caller_id):
        return ALLOW
    return Decision.deny(DenialReason.NOT_TEAM_PARTICIPANT)
