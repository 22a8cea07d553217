# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for team rosters."""

import pytest

from src.domains.sports.errors import SportNotFoundError, TeamNotFoundError
from src.domains.sports.roster import TeamRoster
from src.models.sports import ActivityStatus, TeamCreate


@pytest.fixture
def roster(store):
    return TeamRoster(store)


class TestCreateTeam:
    """Tests for team creation."""

    @pytest.mark.asyncio
    async def test_create_team(self, roster, seed):
        sport_id = await seed.sport()

        team = await roster.create_team(
            TeamCreate(sport_id=sport_id, name="Under 14", coach_id="coach-1")
        )

        assert team.sport_id == sport_id
        assert team.members == []
        assert team.status == ActivityStatus.ACTIVE
        assert team.coach_id == "coach-1"

    @pytest.mark.asyncio
    async def test_create_team_sport_not_found(self, roster):
        with pytest.raises(SportNotFoundError):
            await roster.create_team(TeamCreate(sport_id="missing", name="Under 14"))


class TestMembers:
    """Tests for the member cache helpers."""

    @pytest.mark.asyncio
    async def test_add_member_is_idempotent(self, roster, seed):
        team_id = await seed.team(await seed.sport())

        await roster.add_member(team_id, "s1")
        members = await roster.add_member(team_id, "s1")

        assert members == ["s1"]
        assert (await roster.get_team(team_id)).members == ["s1"]

    @pytest.mark.asyncio
    async def test_add_member_team_not_found(self, roster):
        with pytest.raises(TeamNotFoundError):
            await roster.add_member("missing", "s1")

    @pytest.mark.asyncio
    async def test_remove_member(self, roster, seed):
        team_id = await seed.team(await seed.sport(), members=["s1", "s2"])

        members = await roster.remove_member(team_id, "s1")

        assert members == ["s2"]

    @pytest.mark.asyncio
    async def test_remove_member_missing_team_is_ignored(self, roster):
        assert await roster.remove_member("missing", "s1") is None


class TestMembershipAuthority:
    """Tests for deriving and repairing the member cache."""

    @pytest.mark.asyncio
    async def test_derive_members_uses_active_enrollments(self, roster, seed):
        sport_id = await seed.sport()
        team_id = await seed.team(sport_id)
        await seed.enrollment(sport_id, "s1", team_id=team_id)
        await seed.enrollment(sport_id, "s2", team_id=team_id, status="withdrawn")
        await seed.enrollment(sport_id, "s3", team_id=team_id, status="completed")
        await seed.enrollment(sport_id, "s4")

        assert await roster.derive_members(team_id) == ["s1"]

    @pytest.mark.asyncio
    async def test_sync_members_repairs_drift(self, roster, seed):
        """Test a stale cache is rewritten from the enrollments."""
        sport_id = await seed.sport()
        team_id = await seed.team(sport_id, members=["ghost"])
        await seed.enrollment(sport_id, "s1", team_id=team_id)

        assert await roster.is_consistent(team_id) is False

        team = await roster.sync_members(team_id)

        assert team.members == ["s1"]
        assert await roster.is_consistent(team_id) is True

    @pytest.mark.asyncio
    async def test_derive_members_team_not_found(self, roster):
        with pytest.raises(TeamNotFoundError):
            await roster.derive_members("missing")
