from __future__ import annotations

import logging
from collections.abc import Iterable

from tasktracker.models.team import Team
from tasktracker.models.user import User
from tasktracker.repositories.team import TeamRepository
from tasktracker.repositories.user import UserRepository, normalize_email
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.claims import Claims
from tasktracker.services._shared.deadline import Deadline
from tasktracker.services._shared.errors import ConflictError, NotFoundError, UnauthorizedError
from tasktracker.services._shared.policies import DenialReason, Operation, authorize
from tasktracker.services.identity._converters import user_to_public
from tasktracker.services.identity.dto import UserPublicOut

from ._converters import team_to_out, team_to_snapshot
from .dto import TeamCreateIn, TeamOut, TeamUpdateIn

logger = logging.getLogger(__name__)

OWNER_REMOVAL_MESSAGE = "Cannot remove team owner from team. Transfer ownership first or delete the team."


class TeamService(BaseService):
    """
    Orchestrate team lifecycle and membership.

    Every mutation loads the team with a row lock, snapshots it, evaluates the
    authorization rule and only then writes, all inside one Unit of Work.
    """

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create_team(
        self, claims: Claims, dto: TeamCreateIn, *, deadline: Deadline | None = None
    ) -> TeamOut:
        """
        Create a team owned by the caller.

        :param claims: Verified caller claims.
        :type claims: Claims
        :param dto: Team fields and initial members.
        :type dto: TeamCreateIn
        :returns: Created team.
        :rtype: TeamOut
        :raises NotFoundError: If an initial member does not exist.
        :raises ValidationError: If the name is rejected.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            deadline.check("load_owner")
            owner = uow.users.get_active(claims.subject_id)
            if owner is None:
                raise UnauthorizedError()

            deadline.check("load_members")
            members = self._load_users(uow.users, dto.member_ids)

            deadline.check("create_team")
            with self.model_validation("Team"):
                team = Team(name=dto.name, description=dto.description, owner=owner)
                team.members = members
                uow.teams.add(team)

            logger.info(
                "Team created",
                extra={"team_id": team.id, "owner_id": owner.id, "member_count": len(members)},
            )
            return team_to_out(team)

    def update_team(
        self,
        claims: Claims,
        team_id: str,
        dto: TeamUpdateIn,
        *,
        deadline: Deadline | None = None,
    ) -> TeamOut:
        """
        Rename, transfer ownership and/or replace the member set (owner only).

        All referenced identities are validated before anything is written.
        On ownership transfer the previous owner is kept as a member.

        :raises AuthorizationError: If the caller is not the owner.
        :raises NotFoundError: If the team, new owner or a member is missing.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            team = self._load_team(uow.teams, team_id, deadline)
            self.ensure_allowed(Operation.MANAGE_TEAM, claims.subject_id, team_to_snapshot(team))

            new_owner: User | None = None
            if dto.owner_id is not None and dto.owner_id != team.owner_id:
                deadline.check("load_owner")
                new_owner = uow.users.get_active(dto.owner_id)
                if new_owner is None:
                    raise NotFoundError("User", dto.owner_id)

            members: list[User] | None = None
            if dto.member_ids is not None:
                deadline.check("load_members")
                members = self._load_users(uow.users, dto.member_ids)

            deadline.check("update_team")
            with self.model_validation("Team"):
                fields = {
                    k: v
                    for k, v in {"name": dto.name, "description": dto.description}.items()
                    if v is not None
                }
                if fields:
                    uow.teams.update(team, **fields)
                if members is not None:
                    uow.teams.replace_members(team, members)
                if new_owner is not None:
                    previous = team.owner
                    team.owner = new_owner
                    if previous.id not in team.member_ids:
                        team.members.append(previous)
                    uow.teams.flush()

            logger.info(
                "Team updated",
                extra={
                    "team_id": team.id,
                    "fields": sorted(fields),
                    "owner_changed": new_owner is not None,
                    "members_replaced": members is not None,
                },
            )
            return team_to_out(team)

    def delete_team(self, claims: Claims, team_id: str, *, deadline: Deadline | None = None) -> None:
        """Soft-delete a team (owner only)."""
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            team = self._load_team(uow.teams, team_id, deadline)
            self.ensure_allowed(Operation.MANAGE_TEAM, claims.subject_id, team_to_snapshot(team))
            deadline.check("delete_team")
            uow.teams.delete(team)
            logger.info("Team deleted", extra={"team_id": team.id})

    def add_member(
        self, claims: Claims, team_id: str, user_id: str, *, deadline: Deadline | None = None
    ) -> TeamOut:
        """
        Add one identity to the member set (owner only).

        :raises AuthorizationError: Caller is not the owner, or the identity is
            already a member (``ALREADY_MEMBER``).
        :raises NotFoundError: If the team or identity is missing.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            team = self._load_team(uow.teams, team_id, deadline)
            snapshot = team_to_snapshot(team)
            self.ensure_allowed(Operation.MANAGE_TEAM, claims.subject_id, snapshot)

            deadline.check("load_member")
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            self.ensure_allowed(Operation.ADD_MEMBER, claims.subject_id, snapshot, target_id=user.id)

            deadline.check("add_member")
            uow.teams.add_member(team, user)
            logger.info("Team member added", extra={"team_id": team.id, "user_id": user.id})
            return team_to_out(team)

    def add_members_by_email(
        self,
        claims: Claims,
        team_id: str,
        emails: Iterable[str],
        *,
        deadline: Deadline | None = None,
    ) -> TeamOut:
        """
        Add several identities by email (owner only).

        Every email must resolve to an active identity; members already in the
        team are skipped, but at least one new member is required.

        :raises NotFoundError: If any email is unknown (all are listed).
        :raises ConflictError: If every identity is already a member.
        """
        wanted = list(dict.fromkeys(normalize_email(e) for e in emails if e and e.strip()))
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            team = self._load_team(uow.teams, team_id, deadline)
            self.ensure_allowed(Operation.MANAGE_TEAM, claims.subject_id, team_to_snapshot(team))

            deadline.check("load_members")
            users = uow.users.list_by_emails(wanted)
            found = {u.email for u in users}
            missing = [e for e in wanted if e not in found]
            if missing or not wanted:
                raise NotFoundError("User", ", ".join(missing) or "<no emails>")

            current = team.member_ids
            new_users = [u for u in users if u.id not in current]
            if not new_users:
                raise ConflictError("Team", "All users are already members of this team")

            deadline.check("add_members")
            for user in new_users:
                team.members.append(user)
            uow.teams.flush()

            logger.info(
                "Team members added",
                extra={"team_id": team.id, "added": len(new_users), "skipped": len(users) - len(new_users)},
            )
            return team_to_out(team)

    def remove_member(
        self, claims: Claims, team_id: str, user_id: str, *, deadline: Deadline | None = None
    ) -> TeamOut:
        """
        Remove a member. The owner may remove anyone but themselves; a member
        may remove only themselves (leave).

        :raises AuthorizationError: ``OWNER_NOT_REMOVABLE``, ``NOT_A_MEMBER``
            or ``NOT_TEAM_OWNER``.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            team = self._load_team(uow.teams, team_id, deadline)
            decision = authorize(
                Operation.REMOVE_MEMBER, claims.subject_id, team_to_snapshot(team), target_id=user_id
            )
            decision.require(
                OWNER_REMOVAL_MESSAGE if decision.reason is DenialReason.OWNER_NOT_REMOVABLE else None
            )

            deadline.check("remove_member")
            uow.teams.remove_member(team, user_id)
            logger.info("Team member removed", extra={"team_id": team.id, "user_id": user_id})
            return team_to_out(team)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_team(self, claims: Claims, team_id: str) -> TeamOut:
        """Return a team visible to the caller (owner or member)."""
        with self.ro_uow() as uow:
            team = uow.teams.get_active(team_id)
            if team is None:
                raise NotFoundError("Team", team_id)
            self.ensure_allowed(Operation.VIEW_TEAM, claims.subject_id, team_to_snapshot(team))
            return team_to_out(team)

    def list_user_teams(self, claims: Claims) -> list[TeamOut]:
        """List active teams the caller owns or belongs to."""
        with self.ro_uow() as uow:
            return [team_to_out(t) for t in uow.teams.list_for_user(claims.subject_id)]

    def list_members(self, claims: Claims, team_id: str) -> list[UserPublicOut]:
        """List the members of a team visible to the caller (owner excluded unless a member)."""
        with self.ro_uow() as uow:
            team = uow.teams.get_active(team_id)
            if team is None:
                raise NotFoundError("Team", team_id)
            self.ensure_allowed(Operation.VIEW_TEAM, claims.subject_id, team_to_snapshot(team))
            return [user_to_public(u) for u in uow.users.list_team_members(team.id)]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _load_team(repo: TeamRepository, team_id: str, deadline: Deadline) -> Team:
        deadline.check("load_team")
        team = repo.get_active(team_id, for_update=True)
        if team is None:
            raise NotFoundError("Team", team_id)
        return team

    @staticmethod
    def _load_users(repo: UserRepository, user_ids: Iterable[str]) -> list[User]:
        """Resolve ids to active identities, failing on the first unknown one."""
        ids = list(dict.fromkeys(user_ids))
        by_id = {u.id: u for u in repo.list_by_ids(ids) if u.is_active}
        for user_id in ids:
            if user_id not in by_id:
                raise NotFoundError("User", user_id)
        return [by_id[i] for i in ids]
