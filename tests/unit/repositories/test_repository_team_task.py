"""Unit tests for TeamRepository and TaskRepository."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from tasktracker.models import EntityStatus
from tasktracker.repositories import TaskRepository, TeamRepository, parse_sort_tokens
from tests.factories.task import TaskFactory
from tests.factories.team import TeamFactory
from tests.factories.user import UserFactory


def test_parse_sort_tokens():
    assert parse_sort_tokens(["-due_date", "title", " ", "-"]) == [("due_date", True), ("title", False)]


class TestTeamRepository:
    @pytest.fixture()
    def repo(self):
        return TeamRepository()

    def test_list_for_user_covers_owned_and_member_teams(self, repo, session):
        user = UserFactory()
        owned = TeamFactory(name="Beta", owner=user)
        joined = TeamFactory(name="Alpha", members=[user])
        TeamFactory(name="Gamma")
        TeamFactory(name="Delta", owner=user, status=EntityStatus.INACTIVE)
        session.commit()

        teams = repo.list_for_user(user.id)

        assert [t.id for t in teams] == [joined.id, owned.id]

    def test_membership_helpers(self, repo, session):
        a, b, c = UserFactory(), UserFactory(), UserFactory()
        team = TeamFactory(members=[a])

        repo.add_member(team, b)
        assert team.member_ids == {a.id, b.id}

        repo.remove_member(team, a.id)
        assert team.member_ids == {b.id}

        repo.replace_members(team, [c, c, a])
        session.commit()
        assert repo.get(team.id).member_ids == {a.id, c.id}

    def test_delete_is_soft(self, repo, session):
        team = TeamFactory()
        repo.delete(team)
        session.commit()

        assert repo.get(team.id) is not None
        assert repo.get_active(team.id) is None

    def test_owner_change_is_whitelisted_but_not_members(self, repo, session):
        team = TeamFactory()
        new_owner = UserFactory()

        repo.update(team, owner_id=new_owner.id)
        assert team.owner_id == new_owner.id
        with pytest.raises(ValueError):
            repo.update(team, members=[])


class TestTaskRepository:
    @pytest.fixture()
    def repo(self):
        return TaskRepository()

    def test_listings_filter_by_role_and_hide_inactive(self, repo, session):
        me, other = UserFactory(), UserFactory()
        now = datetime.now(UTC)
        later = TaskFactory(creator=me, due_date=now + timedelta(days=3))
        sooner = TaskFactory(creator=me, due_date=now + timedelta(days=1))
        TaskFactory(creator=me, status=EntityStatus.INACTIVE)
        assigned = TaskFactory(creator=other, assignee=me)
        session.commit()

        assert [t.id for t in repo.list_created_by(me.id)] == [sooner.id, later.id]
        assert [t.id for t in repo.list_created_by(me.id, sort=["-due_date"])] == [later.id, sooner.id]
        assert [t.id for t in repo.list_assigned_to(me.id)] == [assigned.id]

    def test_list_for_team_includes_every_assignee(self, repo, session):
        owner, member = UserFactory(), UserFactory()
        team = TeamFactory(owner=owner, members=[member])
        t1 = TaskFactory(creator=owner, team=team, assignee=member)
        t2 = TaskFactory(creator=member, team=team)
        TaskFactory(creator=owner)
        session.commit()

        assert {t.id for t in repo.list_for_team(team.id)} == {t1.id, t2.id}

    def test_creator_is_not_updatable(self, repo, session):
        task = TaskFactory()
        with pytest.raises(ValueError, match="non-updatable"):
            repo.update(task, creator_id=UserFactory().id)
