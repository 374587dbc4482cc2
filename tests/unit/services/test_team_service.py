# tests/unit/services/test_team_service.py
from __future__ import annotations

import pytest

from tasktracker.models import EntityStatus, Team
from tasktracker.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from tasktracker.services._shared.policies import DenialReason
from tasktracker.services.teams import TeamCreateIn, TeamService, TeamUpdateIn
from tasktracker.services.teams.service import OWNER_REMOVAL_MESSAGE
from tests.factories.team import TeamFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def service() -> TeamService:
    return TeamService()


@pytest.fixture()
def crew(session):
    """An owner, two members and an outsider around one team."""
    owner = UserFactory(first_name="Olga")
    alice = UserFactory(first_name="Alice")
    bob = UserFactory(first_name="Bob")
    outsider = UserFactory(first_name="Zoe")
    team = TeamFactory(name="Platform", owner=owner, members=[alice, bob])
    session.commit()
    return {"owner": owner, "alice": alice, "bob": bob, "outsider": outsider, "team": team}


def _member_ids(session, team_id):
    session.expire_all()
    return session.get(Team, team_id).member_ids


class TestCreateAndUpdate:
    def test_create_team_owned_by_caller(self, service, session, claims_for):
        owner, member = UserFactory(), UserFactory()
        session.commit()

        out = service.create_team(
            claims_for(owner), TeamCreateIn(name=" Platform ", member_ids=(member.id, member.id))
        )

        assert out.name == "Platform"
        assert out.owner.id == owner.id
        assert [m.id for m in out.members] == [member.id]
        assert out.status == EntityStatus.ACTIVE

    def test_create_with_unknown_member_fails_atomically(self, service, session, claims_for):
        owner = UserFactory()
        session.commit()

        with pytest.raises(NotFoundError):
            service.create_team(claims_for(owner), TeamCreateIn(name="Ghosts", member_ids=("missing",)))
        assert session.query(Team).filter_by(name="Ghosts").count() == 0

    def test_create_rejects_blank_name(self, service, session, claims_for):
        owner = UserFactory()
        session.commit()

        with pytest.raises(ValidationError):
            service.create_team(claims_for(owner), TeamCreateIn(name="  "))

    def test_only_owner_updates(self, service, crew, claims_for):
        with pytest.raises(AuthorizationError) as excinfo:
            service.update_team(claims_for(crew["alice"]), crew["team"].id, TeamUpdateIn(name="Mine"))
        assert excinfo.value.reason is DenialReason.NOT_TEAM_OWNER

    def test_transfer_keeps_previous_owner_as_member(self, service, session, crew, claims_for):
        out = service.update_team(
            claims_for(crew["owner"]),
            crew["team"].id,
            TeamUpdateIn(name="Core", owner_id=crew["alice"].id),
        )

        assert out.name == "Core"
        assert out.owner.id == crew["alice"].id
        assert crew["owner"].id in _member_ids(session, crew["team"].id)

    def test_replace_members_validates_everyone_first(self, service, session, crew, claims_for):
        with pytest.raises(NotFoundError):
            service.update_team(
                claims_for(crew["owner"]),
                crew["team"].id,
                TeamUpdateIn(name="Renamed", member_ids=(crew["outsider"].id, "missing")),
            )

        session.expire_all()
        assert session.get(Team, crew["team"].id).name == "Platform"
        assert _member_ids(session, crew["team"].id) == {crew["alice"].id, crew["bob"].id}

    def test_replace_members(self, service, session, crew, claims_for):
        out = service.update_team(
            claims_for(crew["owner"]), crew["team"].id, TeamUpdateIn(member_ids=(crew["outsider"].id,))
        )
        assert [m.id for m in out.members] == [crew["outsider"].id]

    def test_delete_is_owner_only_and_soft(self, service, session, crew, claims_for):
        with pytest.raises(AuthorizationError):
            service.delete_team(claims_for(crew["bob"]), crew["team"].id)

        service.delete_team(claims_for(crew["owner"]), crew["team"].id)

        with pytest.raises(NotFoundError):
            service.get_team(claims_for(crew["owner"]), crew["team"].id)
        session.expire_all()
        assert session.get(Team, crew["team"].id).status == EntityStatus.INACTIVE


class TestMembership:
    def test_owner_adds_member(self, service, session, crew, claims_for):
        out = service.add_member(claims_for(crew["owner"]), crew["team"].id, crew["outsider"].id)
        assert crew["outsider"].id in {m.id for m in out.members}

    def test_add_existing_member_is_denied(self, service, crew, claims_for):
        with pytest.raises(AuthorizationError) as excinfo:
            service.add_member(claims_for(crew["owner"]), crew["team"].id, crew["alice"].id)
        assert excinfo.value.reason is DenialReason.ALREADY_MEMBER

    def test_member_cannot_add(self, service, crew, claims_for):
        with pytest.raises(AuthorizationError) as excinfo:
            service.add_member(claims_for(crew["alice"]), crew["team"].id, crew["outsider"].id)
        assert excinfo.value.reason is DenialReason.NOT_TEAM_OWNER

    def test_add_unknown_user(self, service, crew, claims_for):
        with pytest.raises(NotFoundError):
            service.add_member(claims_for(crew["owner"]), crew["team"].id, "missing")

    def test_add_members_by_email(self, service, session, crew, claims_for):
        newcomer = UserFactory(email="new@example.com")
        session.commit()

        out = service.add_members_by_email(
            claims_for(crew["owner"]), crew["team"].id, ["NEW@example.com", crew["alice"].email]
        )

        assert {m.id for m in out.members} == {crew["alice"].id, crew["bob"].id, newcomer.id}

    def test_add_members_by_email_reports_missing(self, service, crew, claims_for):
        with pytest.raises(NotFoundError, match="ghost@example.com"):
            service.add_members_by_email(claims_for(crew["owner"]), crew["team"].id, ["ghost@example.com"])

    def test_add_members_by_email_all_existing_conflicts(self, service, crew, claims_for):
        with pytest.raises(ConflictError, match="already members"):
            service.add_members_by_email(claims_for(crew["owner"]), crew["team"].id, [crew["bob"].email])

    def test_owner_removes_member(self, service, session, crew, claims_for):
        service.remove_member(claims_for(crew["owner"]), crew["team"].id, crew["bob"].id)
        assert _member_ids(session, crew["team"].id) == {crew["alice"].id}

    def test_member_may_leave_but_not_remove_others(self, service, session, crew, claims_for):
        with pytest.raises(AuthorizationError) as excinfo:
            service.remove_member(claims_for(crew["alice"]), crew["team"].id, crew["bob"].id)
        assert excinfo.value.reason is DenialReason.NOT_TEAM_OWNER

        service.remove_member(claims_for(crew["alice"]), crew["team"].id, crew["alice"].id)
        assert _member_ids(session, crew["team"].id) == {crew["bob"].id}

    def test_owner_cannot_be_removed(self, service, session, crew, claims_for):
        with pytest.raises(AuthorizationError, match="Transfer ownership first") as excinfo:
            service.remove_member(claims_for(crew["owner"]), crew["team"].id, crew["owner"].id)

        assert excinfo.value.reason is DenialReason.OWNER_NOT_REMOVABLE
        assert str(excinfo.value) == OWNER_REMOVAL_MESSAGE
        session.expire_all()
        assert session.get(Team, crew["team"].id).owner_id == crew["owner"].id

    def test_remove_non_member(self, service, crew, claims_for):
        with pytest.raises(AuthorizationError) as excinfo:
            service.remove_member(claims_for(crew["owner"]), crew["team"].id, crew["outsider"].id)
        assert excinfo.value.reason is DenialReason.NOT_A_MEMBER


class TestQueries:
    def test_get_team_requires_participation(self, service, crew, claims_for):
        out = service.get_team(claims_for(crew["bob"]), crew["team"].id)
        assert [m.first_name for m in out.members] == ["Alice", "Bob"]

        with pytest.raises(AuthorizationError) as excinfo:
            service.get_team(claims_for(crew["outsider"]), crew["team"].id)
        assert excinfo.value.reason is DenialReason.NOT_TEAM_PARTICIPANT

    def test_list_members_excludes_owner(self, service, crew, claims_for):
        members = service.list_members(claims_for(crew["owner"]), crew["team"].id)
        assert [m.id for m in members] == [crew["alice"].id, crew["bob"].id]

    def test_list_user_teams(self, service, session, crew, claims_for):
        TeamFactory(name="Another", owner=crew["outsider"], members=[crew["alice"]])
        session.commit()

        names = [t.name for t in service.list_user_teams(claims_for(crew["alice"]))]

        assert names == ["Another", "Platform"]
        assert service.list_user_teams(claims_for(crew["bob"]))[0].name == "Platform"
