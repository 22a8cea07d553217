# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the tournament service."""

from datetime import date

import pytest

from src.domains.sports.errors import (
    InvalidDateRangeError,
    InvalidStateTransitionError,
    MatchNotFoundError,
    MatchScheduleError,
    SportNotFoundError,
    SportsValidationError,
    TeamNotFoundError,
    TeamSportMismatchError,
    TournamentClosedError,
    TournamentNotFoundError,
)
from src.domains.sports.tournament import TournamentService, find_match
from src.models.sports import (
    MatchCreate,
    TournamentCreate,
    TournamentFilters,
    TournamentStatus,
    TournamentType,
    TournamentUpdate,
)


@pytest.fixture
def tournament_service(store, sports_settings, today):
    """Create tournament service on the test store with a fixed clock."""
    return TournamentService(store, settings=sports_settings, today=lambda: today)


def _team_match(match_id: str, match_date: str, team1: str, team2: str) -> dict:
    return {"match_id": match_id, "date": match_date, "team1_id": team1, "team2_id": team2}


class TestCreateTournament:
    """Tests for tournament creation."""

    @pytest.mark.asyncio
    async def test_create_tournament(self, tournament_service, seed):
        sport_id = await seed.sport()

        result = await tournament_service.create_tournament(
            TournamentCreate(
                sport_id=sport_id,
                name="Spring Cup",
                type=TournamentType.INTER_SCHOOL,
                start_date=date(2025, 3, 1),
                end_date=date(2025, 3, 10),
                venue="Main Ground",
            )
        )

        assert result.status == TournamentStatus.SCHEDULED
        assert result.type == TournamentType.INTER_SCHOOL
        assert result.teams == []
        assert result.participants == []
        assert result.schedule == []
        assert result.photos == []
        assert result.videos == []

    @pytest.mark.asyncio
    async def test_create_tournament_sport_not_found(self, tournament_service):
        with pytest.raises(SportNotFoundError):
            await tournament_service.create_tournament(
                TournamentCreate(
                    sport_id="missing",
                    name="Spring Cup",
                    type=TournamentType.DISTRICT,
                    start_date=date(2025, 3, 1),
                    end_date=date(2025, 3, 10),
                )
            )

    @pytest.mark.asyncio
    async def test_end_before_start(self, tournament_service, seed):
        sport_id = await seed.sport()

        with pytest.raises(InvalidDateRangeError, match="End date must be after start date"):
            await tournament_service.create_tournament(
                TournamentCreate(
                    sport_id=sport_id,
                    name="Spring Cup",
                    type=TournamentType.DISTRICT,
                    start_date=date(2025, 3, 10),
                    end_date=date(2025, 3, 1),
                )
            )

    @pytest.mark.asyncio
    async def test_start_in_the_past(self, tournament_service, seed):
        sport_id = await seed.sport()

        with pytest.raises(InvalidDateRangeError, match="Start date cannot be in the past"):
            await tournament_service.create_tournament(
                TournamentCreate(
                    sport_id=sport_id,
                    name="Winter Cup",
                    type=TournamentType.INTRA_SCHOOL,
                    start_date=date(2025, 1, 31),
                    end_date=date(2025, 2, 5),
                )
            )

    @pytest.mark.asyncio
    async def test_start_today_is_allowed(self, tournament_service, seed, today):
        sport_id = await seed.sport()

        result = await tournament_service.create_tournament(
            TournamentCreate(
                sport_id=sport_id,
                name="Today Cup",
                type=TournamentType.INTRA_SCHOOL,
                start_date=today,
                end_date=today,
            )
        )

        assert result.start_date == today


class TestUpdateTournament:
    """Tests for detail updates."""

    @pytest.mark.asyncio
    async def test_update_details(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        result = await tournament_service.update_tournament(
            tournament_id,
            TournamentUpdate(venue="City Stadium", type=TournamentType.REGIONAL),
        )

        assert result.venue == "City Stadium"
        assert result.type == TournamentType.REGIONAL
        assert result.name == "Spring Cup"

    @pytest.mark.asyncio
    async def test_update_cannot_strand_matches(self, tournament_service, seed):
        """Test shrinking the window past a scheduled match is refused."""
        sport_id = await seed.sport()
        tournament_id = await seed.tournament(
            sport_id,
            teams=["t1", "t2"],
            schedule=[_team_match("m1", "2025-03-08", "t1", "t2")],
        )

        with pytest.raises(MatchScheduleError):
            await tournament_service.update_tournament(
                tournament_id, TournamentUpdate(end_date=date(2025, 3, 5))
            )

    @pytest.mark.asyncio
    async def test_none_keeps_required_fields(self, tournament_service, seed):
        """Test explicit None for required fields leaves the stored values."""
        tournament_id = await seed.tournament(await seed.sport())

        result = await tournament_service.update_tournament(
            tournament_id,
            TournamentUpdate(name=None, type=None, start_date=None, end_date=None, venue="Hall"),
        )

        assert result.name == "Spring Cup"
        assert result.type == TournamentType.INTER_SCHOOL
        assert result.start_date == date(2025, 3, 1)
        assert result.end_date == date(2025, 3, 10)
        assert result.venue == "Hall"

    @pytest.mark.asyncio
    async def test_none_clears_optional_fields(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), venue="City Stadium")

        result = await tournament_service.update_tournament(
            tournament_id, TournamentUpdate(start_date=None, venue=None)
        )

        assert result.venue is None
        assert result.start_date == date(2025, 3, 1)

    @pytest.mark.asyncio
    async def test_update_closed_tournament(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), status="completed")

        with pytest.raises(TournamentClosedError):
            await tournament_service.update_tournament(
                tournament_id, TournamentUpdate(venue="Elsewhere")
            )


class TestRosters:
    """Tests for adding teams and participants."""

    @pytest.mark.asyncio
    async def test_add_teams_is_cumulative(self, tournament_service, seed):
        sport_id = await seed.sport()
        team_a = await seed.team(sport_id, name="A")
        team_b = await seed.team(sport_id, name="B")
        tournament_id = await seed.tournament(sport_id)

        await tournament_service.add_teams(tournament_id, [team_a])
        result = await tournament_service.add_teams(tournament_id, [team_a, team_b])

        assert result.teams == [team_a, team_b]
        assert result.team_count == 2

    @pytest.mark.asyncio
    async def test_add_teams_rejects_whole_batch(self, tournament_service, seed):
        """Test one bad team leaves the tournament unchanged."""
        sport_id = await seed.sport()
        team_a = await seed.team(sport_id)
        foreign = await seed.team(await seed.sport(name="Volleyball"))
        tournament_id = await seed.tournament(sport_id)

        with pytest.raises(TeamSportMismatchError):
            await tournament_service.add_teams(tournament_id, [team_a, foreign])

        assert (await tournament_service.get_tournament(tournament_id)).teams == []

    @pytest.mark.asyncio
    async def test_add_teams_team_not_found(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        with pytest.raises(TeamNotFoundError):
            await tournament_service.add_teams(tournament_id, ["missing"])

    @pytest.mark.asyncio
    async def test_add_teams_tournament_not_found(self, tournament_service):
        with pytest.raises(TournamentNotFoundError):
            await tournament_service.add_teams("missing", [])

    @pytest.mark.asyncio
    async def test_add_participants(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), participants=["s1"])

        result = await tournament_service.add_participants(tournament_id, ["s1", "s2"])

        assert result.participants == ["s1", "s2"]

    @pytest.mark.asyncio
    async def test_add_participants_tournament_not_found(self, tournament_service):
        with pytest.raises(TournamentNotFoundError):
            await tournament_service.add_participants("missing", ["s1"])


class TestMatchSchedule:
    """Tests for building the match schedule."""

    @pytest.mark.asyncio
    async def test_schedule_scenario(self, tournament_service, seed):
        """Test the date window and team membership checks end to end."""
        sport_id = await seed.sport()
        team_a = await seed.team(sport_id, name="A")
        team_b = await seed.team(sport_id, name="B")
        tournament = await tournament_service.create_tournament(
            TournamentCreate(
                sport_id=sport_id,
                name="Spring Cup",
                type=TournamentType.INTER_SCHOOL,
                start_date=date(2025, 3, 1),
                end_date=date(2025, 3, 10),
            )
        )

        with pytest.raises(
            MatchScheduleError, match="date must be between tournament start and end dates"
        ):
            await tournament_service.create_match_schedule(
                tournament.id, [_team_match("m1", "2025-03-15", team_a, team_b)]
            )

        with pytest.raises(MatchScheduleError, match="is not part of this tournament"):
            await tournament_service.create_match_schedule(
                tournament.id, [_team_match("m1", "2025-03-05", team_a, team_b)]
            )

        await tournament_service.add_teams(tournament.id, [team_a, team_b])
        result = await tournament_service.create_match_schedule(
            tournament.id, [_team_match("m1", "2025-03-05", team_a, team_b)]
        )

        assert result.match_count == 1
        match = result.schedule[0]
        assert match.match_id == "m1"
        assert match.match_date == date(2025, 3, 5)
        assert match.sides == (team_a, team_b)
        assert match.winner_id is None

    @pytest.mark.asyncio
    async def test_participant_matches(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), participants=["s1", "s2", "s3"])

        result = await tournament_service.create_match_schedule(
            tournament_id,
            [
                MatchCreate(
                    match_id="p1",
                    match_date=date(2025, 3, 2),
                    participant1_id="s1",
                    participant2_id="s2",
                ),
                {"match_id": "p2", "date": "2025-03-03", "participant1_id": "s2", "participant2_id": "s3"},
            ],
        )

        assert [m.match_id for m in result.schedule] == ["p1", "p2"]
        assert not result.schedule[0].is_team_match

    @pytest.mark.asyncio
    async def test_participant_not_in_tournament(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), participants=["s1"])

        with pytest.raises(MatchScheduleError, match="Participant s9 is not part of this tournament"):
            await tournament_service.create_match_schedule(
                tournament_id,
                [{"match_id": "p1", "date": "2025-03-02", "participant1_id": "s1", "participant2_id": "s9"}],
            )

    @pytest.mark.asyncio
    async def test_batch_is_all_or_nothing(self, tournament_service, seed):
        """Test a bad match anywhere in the batch appends nothing."""
        tournament_id = await seed.tournament(await seed.sport(), teams=["t1", "t2"])

        with pytest.raises(MatchScheduleError):
            await tournament_service.create_match_schedule(
                tournament_id,
                [
                    _team_match("m1", "2025-03-02", "t1", "t2"),
                    _team_match("m2", "2025-04-01", "t1", "t2"),
                ],
            )

        assert (await tournament_service.get_tournament(tournament_id)).schedule == []

    @pytest.mark.asyncio
    async def test_duplicate_match_id(self, tournament_service, seed):
        tournament_id = await seed.tournament(
            await seed.sport(),
            teams=["t1", "t2"],
            schedule=[_team_match("m1", "2025-03-02", "t1", "t2")],
        )

        with pytest.raises(MatchScheduleError, match="Match ID m1 already exists"):
            await tournament_service.create_match_schedule(
                tournament_id, [_team_match("m1", "2025-03-03", "t2", "t1")]
            )

    @pytest.mark.asyncio
    async def test_malformed_match(self, tournament_service, seed):
        """Test a match mixing pairing modes is refused."""
        tournament_id = await seed.tournament(await seed.sport(), teams=["t1"], participants=["s1"])

        with pytest.raises(MatchScheduleError, match="Invalid match"):
            await tournament_service.create_match_schedule(
                tournament_id,
                [{"match_id": "m1", "date": "2025-03-02", "team1_id": "t1", "participant2_id": "s1"}],
            )

    @pytest.mark.asyncio
    async def test_get_match(self, tournament_service, seed):
        tournament_id = await seed.tournament(
            await seed.sport(),
            teams=["t1", "t2"],
            schedule=[_team_match("m1", "2025-03-02", "t1", "t2")],
        )

        match = await tournament_service.get_match(tournament_id, "m1")

        assert match.team1_id == "t1"
        with pytest.raises(MatchNotFoundError):
            await tournament_service.get_match(tournament_id, "m9")

    def test_find_match(self):
        schedule = [{"match_id": "a"}, {"match_id": "b"}]

        assert find_match(schedule, "b") == 1
        assert find_match(schedule, "c") is None


class TestTournamentStatus:
    """Tests for status transitions."""

    @pytest.mark.asyncio
    async def test_scheduled_to_ongoing_to_completed(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        await tournament_service.update_tournament_status(tournament_id, TournamentStatus.ONGOING)
        result = await tournament_service.update_tournament_status(tournament_id, "completed")

        assert result.status == TournamentStatus.COMPLETED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("terminal", ["completed", "cancelled"])
    @pytest.mark.parametrize("target", list(TournamentStatus))
    async def test_terminal_rejects_every_target(self, tournament_service, seed, terminal, target):
        """Test completed and cancelled tournaments never change status."""
        tournament_id = await seed.tournament(await seed.sport(), status=terminal)

        with pytest.raises(
            InvalidStateTransitionError, match=f"Cannot change status of a {terminal} tournament"
        ):
            await tournament_service.update_tournament_status(tournament_id, target)

        assert (await tournament_service.get_tournament(tournament_id)).status.value == terminal

    @pytest.mark.asyncio
    async def test_scheduled_cannot_complete(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        with pytest.raises(InvalidStateTransitionError):
            await tournament_service.update_tournament_status(tournament_id, "completed")

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        with pytest.raises(SportsValidationError, match="finished"):
            await tournament_service.update_tournament_status(tournament_id, "finished")

        assert (await tournament_service.get_tournament(tournament_id)).status.value == "scheduled"


class TestDeleteTournament:
    """Tests for tournament deletion."""

    @pytest.mark.asyncio
    async def test_delete_unlinks_achievements(self, tournament_service, store, seed):
        sport_id = await seed.sport()
        tournament_id = await seed.tournament(sport_id, status="cancelled")
        achievement_id = await seed.achievement(sport_id, "s1", tournament_id=tournament_id)

        assert await tournament_service.delete_tournament(tournament_id) is True

        with pytest.raises(TournamentNotFoundError):
            await tournament_service.get_tournament(tournament_id)
        achievement = await store.achievements.find_by_id(achievement_id)
        assert achievement.tournament_id is None

    @pytest.mark.asyncio
    async def test_delete_completed_fails(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport(), status="completed")

        with pytest.raises(TournamentClosedError, match="Cannot delete a completed tournament"):
            await tournament_service.delete_tournament(tournament_id)


class TestMediaAndQueries:
    """Tests for media lists and tournament listings."""

    @pytest.mark.asyncio
    async def test_upload_media_appends(self, tournament_service, seed):
        tournament_id = await seed.tournament(await seed.sport())

        await tournament_service.upload_photos(tournament_id, ["p1.jpg"])
        await tournament_service.upload_photos(tournament_id, ["p2.jpg", "p1.jpg"])
        result = await tournament_service.upload_videos(tournament_id, ["final.mp4"])

        assert result.photos == ["p1.jpg", "p2.jpg", "p1.jpg"]
        assert result.videos == ["final.mp4"]

    @pytest.mark.asyncio
    async def test_upload_photos_tournament_not_found(self, tournament_service):
        with pytest.raises(TournamentNotFoundError):
            await tournament_service.upload_photos("missing", ["p.jpg"])

    @pytest.mark.asyncio
    async def test_upcoming_tournaments(self, tournament_service, seed):
        sport_id = await seed.sport()
        past = await seed.tournament(
            sport_id, start_date=date(2025, 1, 5), end_date=date(2025, 1, 6)
        )
        later = await seed.tournament(
            sport_id, start_date=date(2025, 4, 1), end_date=date(2025, 4, 2)
        )
        sooner = await seed.tournament(
            sport_id, start_date=date(2025, 3, 1), end_date=date(2025, 3, 2)
        )
        await seed.tournament(
            sport_id, status="cancelled", start_date=date(2025, 3, 5), end_date=date(2025, 3, 6)
        )

        result = await tournament_service.get_upcoming_tournaments()

        assert [t.id for t in result] == [sooner, later]
        assert past not in [t.id for t in result]

    @pytest.mark.asyncio
    async def test_tournaments_by_sport_latest_first(self, tournament_service, seed):
        sport_id = await seed.sport()
        early = await seed.tournament(sport_id, start_date=date(2025, 3, 1))
        late = await seed.tournament(sport_id, start_date=date(2025, 5, 1), end_date=date(2025, 5, 3))

        result = await tournament_service.get_tournaments_by_sport(sport_id)

        assert [t.id for t in result] == [late, early]

    @pytest.mark.asyncio
    async def test_list_tournaments_filters_and_pagination(self, tournament_service, seed):
        sport_id = await seed.sport()
        stadium = await seed.tournament(sport_id, venue="City Stadium")
        await seed.tournament(sport_id, venue="School Ground")

        page = await tournament_service.list_tournaments(
            TournamentFilters(venue="stadium"), page=1, limit=5
        )

        assert [t.id for t in page.items] == [stadium]
        assert page.pagination.total == 1
        assert page.pagination.limit == 5
