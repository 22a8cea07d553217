# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tournament scheduling service.

This module provides the TournamentService class for:
- Creating, updating and deleting tournaments
- Attaching teams and individual participants
- Building the match schedule within the tournament's date window
- Status transitions and media lists

Batch operations validate every item before applying any of them, so a
failing item leaves the tournament unchanged.
"""

import logging
from datetime import date
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from src.core.config import SportsSettings, get_settings
from src.domains.sports.errors import (
    InvalidDateRangeError,
    MatchNotFoundError,
    MatchScheduleError,
    SportNotFoundError,
    TeamNotFoundError,
    TeamSportMismatchError,
    TournamentClosedError,
    TournamentNotFoundError,
)
from src.domains.sports.lifecycle import TOURNAMENT_TRANSITIONS, ensure_tournament_transition, is_terminal
from src.infrastructure.database.models import SportsAchievement, Tournament
from src.infrastructure.database.store import Pagination, SportsDataStore
from src.models.sports import (
    Match,
    MatchCreate,
    TournamentCreate,
    TournamentFilters,
    TournamentPage,
    TournamentResponse,
    TournamentStatus,
    TournamentUpdate,
)
from src.utils.datetime import to_date, utc_today

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = (TournamentStatus.SCHEDULED.value, TournamentStatus.ONGOING.value)

# Columns an update may change but never clear
REQUIRED_FIELDS = frozenset({"name", "type", "start_date", "end_date"})


def find_match(schedule: list[dict[str, Any]], match_id: str) -> int | None:
    """Index of a match in a stored schedule, or None."""
    for index, match in enumerate(schedule):
        if match.get("match_id") == match_id:
            return index
    return None


class TournamentService:
    """Service for managing tournaments and their schedules.

    Attributes:
        store: Unit of work for the sports tables.
        settings: Sports program settings.
    """

    def __init__(
        self,
        store: SportsDataStore,
        settings: SportsSettings | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize tournament service.

        Args:
            store: Unit of work for the sports tables.
            settings: Sports settings; defaults to the application settings.
            today: Clock used to reject start dates in the past.
        """
        self.store = store
        self.settings = settings or get_settings().sports
        self._today = today

    async def create_tournament(
        self,
        request: TournamentCreate,
        actor_id: str | None = None,
    ) -> TournamentResponse:
        """Create a scheduled tournament with empty rosters and schedule.

        Args:
            request: Tournament creation data.
            actor_id: ID of the user creating the tournament.

        Returns:
            The created tournament.

        Raises:
            SportNotFoundError: If sport not found.
            InvalidDateRangeError: If end precedes start or start is in the past.
        """
        async with self.store.transaction():
            sport = await self.store.sports.find_by_id(request.sport_id)
            if sport is None:
                raise SportNotFoundError(f"Sport with ID {request.sport_id} not found")

            if request.end_date < request.start_date:
                raise InvalidDateRangeError("End date must be after start date")
            if request.start_date < self._today():
                raise InvalidDateRangeError("Start date cannot be in the past")

            tournament = await self.store.tournaments.create(
                **request.model_dump(exclude={"type"}),
                type=request.type.value,
                status=TournamentStatus.SCHEDULED.value,
                teams=[],
                participants=[],
                schedule=[],
                photos=[],
                videos=[],
            )
            response = self._to_response(tournament)

        logger.info(
            "Created tournament: id=%s, sport=%s, by=%s", response.id, response.sport_id, actor_id
        )
        return response

    async def update_tournament(
        self,
        tournament_id: str,
        request: TournamentUpdate,
    ) -> TournamentResponse:
        """Update tournament details.

        The merged dates must stay ordered and keep every scheduled match
        inside the window. An explicit None for name, type or either date
        leaves the stored value in place.

        Raises:
            TournamentNotFoundError: If tournament not found.
            TournamentClosedError: If the tournament is completed or cancelled.
            InvalidDateRangeError: If the merged end date precedes the start date.
            MatchScheduleError: If a scheduled match would fall outside the dates.
        """
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            if is_terminal(TOURNAMENT_TRANSITIONS, TournamentStatus(tournament.status)):
                raise TournamentClosedError(tournament.status)

            changes = {
                key: value
                for key, value in request.model_dump(exclude_unset=True).items()
                if value is not None or key not in REQUIRED_FIELDS
            }
            start_date = changes.get("start_date") or tournament.start_date
            end_date = changes.get("end_date") or tournament.end_date
            if end_date < start_date:
                raise InvalidDateRangeError("End date must be after start date")

            for match in tournament.schedule or []:
                match_date = to_date(match["date"])
                if not start_date <= match_date <= end_date:
                    raise MatchScheduleError(
                        f"Match {match['match_id']} would fall outside the tournament dates"
                    )

            if "type" in changes:
                changes["type"] = changes["type"].value
            tournament = await self.store.tournaments.update(tournament_id, **changes)
            response = self._to_response(tournament)

        logger.info("Updated tournament: id=%s, fields=%s", tournament_id, sorted(changes))
        return response

    async def add_teams(self, tournament_id: str, team_ids: Iterable[str]) -> TournamentResponse:
        """Attach teams to a tournament.

        Every team is validated before any is added. Teams already
        attached are skipped.

        Raises:
            TournamentNotFoundError: If tournament not found.
            TeamNotFoundError: If any team is not found.
            TeamSportMismatchError: If any team belongs to another sport.
        """
        team_ids = list(team_ids)
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)

            for team_id in team_ids:
                team = await self.store.teams.find_by_id(team_id)
                if team is None:
                    raise TeamNotFoundError(f"Team with ID {team_id} not found")
                if team.sport_id != tournament.sport_id:
                    raise TeamSportMismatchError(
                        f"Team {team_id} does not belong to sport {tournament.sport_id}"
                    )

            teams = _merge_unique(tournament.teams, team_ids)
            tournament = await self.store.tournaments.update(tournament_id, teams=teams)
            response = self._to_response(tournament)

        logger.info("Added teams: tournament=%s, teams=%d", tournament_id, response.team_count)
        return response

    async def add_participants(
        self, tournament_id: str, student_ids: Iterable[str]
    ) -> TournamentResponse:
        """Attach individual participants. Existing participants are skipped.

        Raises:
            TournamentNotFoundError: If tournament not found.
        """
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            participants = _merge_unique(tournament.participants, student_ids)
            tournament = await self.store.tournaments.update(
                tournament_id, participants=participants
            )
            return self._to_response(tournament)

    async def create_match_schedule(
        self,
        tournament_id: str,
        matches: Iterable[MatchCreate | dict[str, Any]],
    ) -> TournamentResponse:
        """Append matches to a tournament schedule in the order given.

        Args:
            tournament_id: Tournament identifier.
            matches: Matches to schedule.

        Returns:
            The tournament with its updated schedule.

        Raises:
            TournamentNotFoundError: If tournament not found.
            MatchScheduleError: If any match is malformed, duplicates a match
                id, falls outside the tournament dates or names a team or
                participant that is not part of the tournament. Nothing is
                appended in that case.
        """
        try:
            requested = [MatchCreate.model_validate(match) for match in matches]
        except ValidationError as e:
            raise MatchScheduleError(f"Invalid match: {e}") from e

        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            schedule = list(tournament.schedule or [])
            seen_ids = {match.get("match_id") for match in schedule}

            for match in requested:
                if match.match_id in seen_ids:
                    raise MatchScheduleError(
                        f"Match ID {match.match_id} already exists in this tournament"
                    )
                seen_ids.add(match.match_id)
                self._validate_match(tournament, match)

            schedule.extend(Match(**match.model_dump()).to_record() for match in requested)
            tournament = await self.store.tournaments.update(tournament_id, schedule=schedule)
            response = self._to_response(tournament)

        logger.info(
            "Scheduled matches: tournament=%s, added=%d, total=%d",
            tournament_id,
            len(requested),
            response.match_count,
        )
        return response

    async def update_tournament_status(
        self,
        tournament_id: str,
        status: TournamentStatus | str,
    ) -> TournamentResponse:
        """Move a tournament to a new status.

        Completed and cancelled tournaments reject every request,
        including one for their current status.

        Raises:
            TournamentNotFoundError: If tournament not found.
            InvalidStateTransitionError: If the transition is not allowed.
        """
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            current = TournamentStatus(tournament.status)
            message = None
            if is_terminal(TOURNAMENT_TRANSITIONS, current):
                message = f"Cannot change status of a {current.value} tournament"
            target = ensure_tournament_transition(current, status, message)

            tournament = await self.store.tournaments.update(tournament_id, status=target.value)
            response = self._to_response(tournament)

        logger.info(
            "Tournament status changed: id=%s, %s -> %s", tournament_id, current.value, target.value
        )
        return response

    async def delete_tournament(self, tournament_id: str) -> bool:
        """Delete a tournament that has not been completed.

        Achievements that referenced it keep their data but lose the link.

        Raises:
            TournamentNotFoundError: If tournament not found.
            TournamentClosedError: If the tournament is completed.
        """
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            if tournament.status == TournamentStatus.COMPLETED.value:
                raise TournamentClosedError(
                    tournament.status, "Cannot delete a completed tournament"
                )

            linked = await self.store.achievements.find_all(tournament_id=tournament_id)
            for achievement in linked:
                await self.store.achievements.update(achievement.id, tournament_id=None)

            deleted = await self.store.tournaments.destroy(tournament_id)

        logger.info("Deleted tournament: id=%s, unlinked_achievements=%d", tournament_id, len(linked))
        return deleted

    async def upload_photos(self, tournament_id: str, urls: Iterable[str]) -> TournamentResponse:
        """Append photo URLs to a tournament."""
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            photos = list(tournament.photos or []) + list(urls)
            tournament = await self.store.tournaments.update(tournament_id, photos=photos)
            return self._to_response(tournament)

    async def upload_videos(self, tournament_id: str, urls: Iterable[str]) -> TournamentResponse:
        """Append video URLs to a tournament."""
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            videos = list(tournament.videos or []) + list(urls)
            tournament = await self.store.tournaments.update(tournament_id, videos=videos)
            return self._to_response(tournament)

    async def get_tournament(self, tournament_id: str) -> TournamentResponse:
        tournament = await self._get_tournament(tournament_id)
        return self._to_response(tournament)

    async def get_match(self, tournament_id: str, match_id: str) -> Match:
        """Look up one match of a tournament.

        Raises:
            TournamentNotFoundError: If tournament not found.
            MatchNotFoundError: If the match is not in the schedule.
        """
        tournament = await self._get_tournament(tournament_id)
        index = find_match(tournament.schedule or [], match_id)
        if index is None:
            raise MatchNotFoundError(f"Match with ID {match_id} not found in tournament")
        return Match.model_validate(tournament.schedule[index])

    async def get_tournaments_by_sport(
        self,
        sport_id: str,
        status: TournamentStatus | None = None,
    ) -> list[TournamentResponse]:
        """Tournaments of a sport, latest start date first."""
        filters: dict[str, Any] = {"sport_id": sport_id}
        if status is not None:
            filters["status"] = TournamentStatus(status).value
        tournaments = await self.store.tournaments.find_all(
            order_by=Tournament.start_date.desc(), **filters
        )
        return [self._to_response(t) for t in tournaments]

    async def get_upcoming_tournaments(
        self,
        limit: int = 10,
        sport_id: str | None = None,
    ) -> list[TournamentResponse]:
        """Scheduled or ongoing tournaments starting today or later, soonest first."""
        criteria = [
            Tournament.start_date >= self._today(),
            Tournament.status.in_(UPCOMING_STATUSES),
        ]
        filters = {"sport_id": sport_id} if sport_id else {}
        tournaments = await self.store.tournaments.find_all(
            *criteria,
            order_by=Tournament.start_date,
            limit=limit,
            **filters,
        )
        return [self._to_response(t) for t in tournaments]

    async def list_tournaments(
        self,
        filters: TournamentFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> TournamentPage:
        """List tournaments with filters and offset pagination, latest first."""
        filters = filters or TournamentFilters()
        pagination = Pagination.from_params(
            page,
            limit,
            default_limit=self.settings.default_page_limit,
            max_limit=self.settings.max_page_limit,
        )

        criteria = []
        if filters.start_date_from is not None:
            criteria.append(Tournament.start_date >= filters.start_date_from)
        if filters.start_date_to is not None:
            criteria.append(Tournament.start_date <= filters.start_date_to)
        if filters.venue:
            criteria.append(Tournament.venue.ilike(f"%{filters.venue}%"))

        equality = filters.model_dump(
            include={"sport_id", "type", "status"}, exclude_none=True, mode="json"
        )
        rows, meta = await self.store.tournaments.paginate(
            pagination,
            *criteria,
            order_by=Tournament.start_date.desc(),
            **equality,
        )
        return TournamentPage(items=[self._to_response(t) for t in rows], pagination=meta)

    def _validate_match(self, tournament: Tournament, match: MatchCreate) -> None:
        if not tournament.start_date <= match.match_date <= tournament.end_date:
            raise MatchScheduleError(
                f"Match {match.match_id} date must be between tournament start and end dates"
            )

        if match.is_team_match:
            members, label = tournament.teams or [], "Team"
        else:
            members, label = tournament.participants or [], "Participant"
        for side in match.sides:
            if side not in members:
                raise MatchScheduleError(f"{label} {side} is not part of this tournament")

    async def _get_tournament(self, tournament_id: str, for_update: bool = False) -> Tournament:
        tournament = await self.store.tournaments.find_by_id(tournament_id, for_update=for_update)
        if tournament is None:
            raise TournamentNotFoundError(f"Tournament with ID {tournament_id} not found")
        return tournament

    @staticmethod
    def _to_response(tournament: Tournament) -> TournamentResponse:
        return TournamentResponse.model_validate(tournament)


def _merge_unique(existing: list[str] | None, additions: Iterable[str]) -> list[str]:
    merged = list(existing or [])
    for item in additions:
        if item not in merged:
            merged.append(item)
    return merged
