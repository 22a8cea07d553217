# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Match result recording and win/loss/draw tallies.

tally_matches() holds the derivation rule for every competitor in a
schedule:

- matches_played increments for both sides of every match
- a declared winner gets a win and the other side a loss
- with no winner, equal non-empty scores give both sides a draw
- otherwise nothing else is counted
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Iterable

from src.domains.sports.errors import (
    InvalidWinnerError,
    MatchNotFoundError,
    TournamentClosedError,
    TournamentNotFoundError,
)
from src.domains.sports.tournament import find_match
from src.infrastructure.database.models import Tournament
from src.infrastructure.database.store import SportsDataStore
from src.models.sports import (
    CompetitorKind,
    Match,
    MatchResultInput,
    TournamentResponse,
    TournamentStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class CompetitorTally:
    """Running record for one team or participant in a tournament.

    Attributes:
        competitor_id: Team id or student id.
        kind: Whether the competitor is a team or a participant.
        matches_played: Matches the competitor appears in.
        wins: Matches won.
        losses: Matches lost.
        draws: Matches drawn.
    """

    competitor_id: str
    kind: CompetitorKind
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


def tally_matches(matches: Iterable[Match | dict[str, Any]]) -> list[CompetitorTally]:
    """Derive per-competitor tallies from a match schedule.

    Args:
        matches: Scheduled matches, as models or stored records.

    Returns:
        One tally per competitor, in order of first appearance.
    """
    tallies: dict[tuple[CompetitorKind, str], CompetitorTally] = {}

    for raw in matches:
        match = raw if isinstance(raw, Match) else Match.model_validate(raw)
        kind = CompetitorKind.TEAM if match.is_team_match else CompetitorKind.PARTICIPANT
        is_draw = (
            not match.winner_id
            and bool(match.score1)
            and bool(match.score2)
            and match.score1 == match.score2
        )

        for side in match.sides:
            tally = tallies.get((kind, side))
            if tally is None:
                tally = tallies[(kind, side)] = CompetitorTally(competitor_id=side, kind=kind)

            tally.matches_played += 1
            if match.winner_id:
                if match.winner_id == side:
                    tally.wins += 1
                else:
                    tally.losses += 1
            elif is_draw:
                tally.draws += 1

    return list(tallies.values())


class MatchResultService:
    """Service for recording match results.

    Attributes:
        store: Unit of work for the sports tables.
    """

    def __init__(self, store: SportsDataStore) -> None:
        self.store = store

    async def record_match_result(
        self,
        tournament_id: str,
        match_id: str,
        result: MatchResultInput,
    ) -> TournamentResponse:
        """Merge a result into one match of the schedule.

        Only the fields set on ``result`` are merged; other matches are
        left untouched.

        Args:
            tournament_id: Tournament identifier.
            match_id: Match identifier within the schedule.
            result: Scores, winner and remarks to merge.

        Returns:
            The tournament with the updated schedule.

        Raises:
            TournamentNotFoundError: If tournament not found.
            TournamentClosedError: If the tournament was cancelled.
            MatchNotFoundError: If the match is not in the schedule.
            InvalidWinnerError: If the winner is not one of the match's sides.
        """
        async with self.store.transaction():
            tournament = await self._get_tournament(tournament_id, for_update=True)
            if tournament.status == TournamentStatus.CANCELLED.value:
                raise TournamentClosedError(
                    tournament.status, "Cannot record results for a cancelled tournament"
                )

            schedule = list(tournament.schedule or [])
            index = find_match(schedule, match_id)
            if index is None:
                raise MatchNotFoundError(f"Match with ID {match_id} not found in tournament")

            match = Match.model_validate(schedule[index])
            if result.winner_id is not None and result.winner_id not in match.sides:
                raise InvalidWinnerError("Winner must be one of the match participants")

            merged = {**schedule[index], **result.model_dump(exclude_unset=True)}
            schedule[index] = Match.model_validate(merged).to_record()

            tournament = await self.store.tournaments.update(tournament_id, schedule=schedule)
            response = TournamentResponse.model_validate(tournament)

        logger.info(
            "Match result recorded: tournament=%s, match=%s, winner=%s, score=%s-%s",
            tournament_id,
            match_id,
            schedule[index].get("winner_id"),
            schedule[index].get("score1"),
            schedule[index].get("score2"),
        )
        return response

    async def get_player_statistics(self, tournament_id: str) -> list[CompetitorTally]:
        """Win/loss/draw tallies for every team and participant in a tournament.

        Raises:
            TournamentNotFoundError: If tournament not found.
        """
        tournament = await self._get_tournament(tournament_id)
        tallies = tally_matches(tournament.schedule or [])
        logger.debug("Player statistics: tournament=%s, competitors=%d", tournament_id, len(tallies))
        return tallies

    async def _get_tournament(self, tournament_id: str, for_update: bool = False) -> Tournament:
        tournament = await self.store.tournaments.find_by_id(tournament_id, for_update=for_update)
        if tournament is None:
            raise TournamentNotFoundError(f"Tournament with ID {tournament_id} not found")
        return tournament
