# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-only statistics over enrollments, tournaments and achievements.

Attendance averages only include enrollments with at least one recorded
session and are rounded half-up to two decimals.
"""

import logging
from collections import Counter
from typing import Iterable

from src.domains.sports.results import CompetitorTally, MatchResultService
from src.infrastructure.database.models import SportsAchievement, SportsEnrollment
from src.infrastructure.database.store import SportsDataStore
from src.models.sports import (
    AchievementType,
    EnrollmentStats,
    EnrollmentStatus,
    MedalCount,
    ParticipationRow,
    ParticipationSummary,
    SportAchievementStats,
    TournamentStats,
    TournamentStatus,
)
from src.utils.numbers import mean

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"


def average_attendance(enrollments: Iterable[SportsEnrollment]) -> float:
    """Mean attendance percentage of enrollments that have sessions."""
    return mean([e.attendance_percentage for e in enrollments if e.total_sessions > 0])


def count_medals(achievements: Iterable[SportsAchievement]) -> MedalCount:
    """Count medal achievements by color."""
    colors = Counter(a.medal for a in achievements if a.is_medal)
    return MedalCount(gold=colors["gold"], silver=colors["silver"], bronze=colors["bronze"])


class SportsStatisticsService:
    """Aggregates sports program data for reports and dashboards.

    Attributes:
        store: Unit of work for the sports tables.
        results: Match result service used for tournament tallies.
    """

    def __init__(self, store: SportsDataStore, results: MatchResultService | None = None) -> None:
        self.store = store
        self.results = results or MatchResultService(store)

    async def get_enrollment_stats(self, sport_id: str) -> EnrollmentStats:
        """Enrollment counts per status and the average attendance for a sport."""
        enrollments = await self.store.enrollments.find_all(sport_id=sport_id)
        statuses = Counter(e.status for e in enrollments)

        return EnrollmentStats(
            total=len(enrollments),
            active=statuses[EnrollmentStatus.ACTIVE.value],
            withdrawn=statuses[EnrollmentStatus.WITHDRAWN.value],
            completed=statuses[EnrollmentStatus.COMPLETED.value],
            average_attendance=average_attendance(enrollments),
        )

    async def get_student_participation_summary(self, student_id: str) -> ParticipationSummary:
        """A student's enrollments across all sports.

        Args:
            student_id: Student identifier.

        Returns:
            Counts, average attendance and one row per enrollment. Sports
            that no longer exist are named "Unknown".
        """
        enrollments = await self.store.enrollments.find_all(
            order_by=[SportsEnrollment.enrollment_date.desc(), SportsEnrollment.created_at.desc()],
            student_id=student_id,
        )

        sport_names: dict[str, str] = {}
        team_names: dict[str, str | None] = {}
        rows: list[ParticipationRow] = []
        for enrollment in enrollments:
            if enrollment.sport_id not in sport_names:
                sport = await self.store.sports.find_by_id(enrollment.sport_id)
                sport_names[enrollment.sport_id] = sport.name if sport else UNKNOWN_NAME

            team_name = None
            if enrollment.team_id:
                if enrollment.team_id not in team_names:
                    team = await self.store.teams.find_by_id(enrollment.team_id)
                    team_names[enrollment.team_id] = team.name if team else None
                team_name = team_names[enrollment.team_id]

            rows.append(
                ParticipationRow(
                    enrollment_id=enrollment.id,
                    sport_id=enrollment.sport_id,
                    sport_name=sport_names[enrollment.sport_id],
                    team_id=enrollment.team_id,
                    team_name=team_name,
                    status=enrollment.status,
                    attendance_percentage=enrollment.attendance_percentage,
                    enrollment_date=enrollment.enrollment_date,
                )
            )

        statuses = Counter(e.status for e in enrollments)
        return ParticipationSummary(
            student_id=student_id,
            total=len(enrollments),
            active=statuses[EnrollmentStatus.ACTIVE.value],
            completed=statuses[EnrollmentStatus.COMPLETED.value],
            average_attendance=average_attendance(enrollments),
            sports=rows,
        )

    async def get_tournament_stats(self, sport_id: str) -> TournamentStats:
        """Tournament counts per status and match totals for a sport."""
        tournaments = await self.store.tournaments.find_all(sport_id=sport_id)
        statuses = Counter(t.status for t in tournaments)
        total_matches = sum(t.match_count for t in tournaments)

        return TournamentStats(
            total=len(tournaments),
            scheduled=statuses[TournamentStatus.SCHEDULED.value],
            ongoing=statuses[TournamentStatus.ONGOING.value],
            completed=statuses[TournamentStatus.COMPLETED.value],
            cancelled=statuses[TournamentStatus.CANCELLED.value],
            total_matches=total_matches,
            average_matches=total_matches / len(tournaments) if tournaments else 0,
        )

    async def get_player_statistics(self, tournament_id: str) -> list[CompetitorTally]:
        return await self.results.get_player_statistics(tournament_id)

    async def get_sport_achievement_stats(self, sport_id: str) -> SportAchievementStats:
        """Achievement counts by type and level, medals by color and records."""
        achievements = await self.store.achievements.find_all(sport_id=sport_id)

        return SportAchievementStats(
            total=len(achievements),
            by_type=dict(Counter(a.type for a in achievements)),
            by_level=dict(Counter(a.level for a in achievements)),
            medal_count=count_medals(achievements),
            record_count=sum(1 for a in achievements if a.type == AchievementType.RECORD.value),
        )

    async def get_medal_count(self, student_id: str) -> MedalCount:
        achievements = await self.store.achievements.find_all(
            student_id=student_id, type=AchievementType.MEDAL.value
        )
        return count_medals(achievements)
