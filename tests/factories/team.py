"""Factory Boy definition for :class:`tasktracker.models.team.Team`."""

from __future__ import annotations

import factory

from tasktracker.models.team import Team
from tests.factories import BaseFactory, SQLAlchemySession
from tests.factories.user import UserFactory


class TeamFactory(BaseFactory):
    """
    Build persisted teams.

    ``members`` accepts a list of users: ``TeamFactory(members=[u1, u2])``.
    The owner is not added as a member unless listed.
    """

    class Meta:
        model = Team

    name = factory.Sequence(lambda n: f"Team {n}")
    description = factory.Faker("sentence", nb_words=6)
    owner = factory.SubFactory(UserFactory)

    @factory.post_generation
    def members(obj, create, extracted, **kwargs):
        if not extracted:
            return
        obj.members.extend(extracted)
        if create:
            SQLAlchemySession.get().flush()
