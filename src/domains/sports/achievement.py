# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sports achievements, certificate eligibility and certificate data.

This module provides the SportsAchievementService class for:
- Recording and updating achievements with type-conditional validation
- Deciding whether an enrollment qualifies for a participation certificate
- Assembling participation and achievement certificate payloads
- Building the sports section of a student's CV
- Listing school records

Display labels are plain English; rendering the certificates is left to
the caller.
"""

import logging
from typing import Any

from src.core.config import SportsSettings, get_settings
from src.domains.sports.errors import (
    AchievementNotFoundError,
    AchievementValidationError,
    CertificateNotAllowedError,
    EnrollmentNotFoundError,
    SportNotFoundError,
    TeamNotFoundError,
    TeamSportMismatchError,
    TournamentNotFoundError,
)
from src.domains.sports.statistics import count_medals
from src.infrastructure.database.models import Sport, SportsAchievement, SportsEnrollment
from src.infrastructure.database.store import SportsDataStore
from src.models.sports import (
    AchievementCertificateData,
    AchievementCreate,
    AchievementFilters,
    AchievementResponse,
    AchievementType,
    AchievementUpdate,
    CVAchievement,
    CVParticipation,
    CVSummary,
    EligibilityResult,
    EnrollmentStatus,
    ParticipationCertificateData,
    SchoolRecord,
    StudentSportsCV,
)
from src.utils.datetime import ensure_utc, months_between, months_to_human
from src.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

CATEGORY_LABELS = {
    "individual": "Individual Sport",
    "team": "Team Sport",
    "traditional": "Traditional Sport",
}

TYPE_LABELS = {
    "medal": "Medal",
    "trophy": "Trophy",
    "certificate": "Certificate",
    "rank": "Rank",
    "record": "Record",
    "recognition": "Recognition",
}

LEVEL_LABELS = {
    "school": "School Level",
    "inter_school": "Inter-School Level",
    "district": "District Level",
    "regional": "Regional Level",
    "national": "National Level",
    "international": "International Level",
}

UNKNOWN_ACADEMIC_YEAR = "Unknown Academic Year"


def format_category(category: str | None) -> str:
    return CATEGORY_LABELS.get(category or "", category or "")


def format_achievement_type(achievement_type: str | None) -> str:
    return TYPE_LABELS.get(achievement_type or "", achievement_type or "")


def format_achievement_level(level: str | None) -> str:
    return LEVEL_LABELS.get(level or "", level or "")


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


class SportsAchievementService:
    """Service for achievements and certificate data.

    Attributes:
        store: Unit of work for the sports tables.
        settings: Sports settings holding certificate thresholds and the
            levels counted as high-level.
    """

    def __init__(self, store: SportsDataStore, settings: SportsSettings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings().sports

    @staticmethod
    def validate_achievement_data(data: AchievementCreate | AchievementUpdate | dict[str, Any]) -> None:
        """Check the fields each achievement type requires.

        - medal needs a medal color
        - record needs record_type and record_value
        - rank needs a position

        Raises:
            AchievementValidationError: If a required field is missing.
        """
        fields = data if isinstance(data, dict) else data.model_dump()
        achievement_type = _plain(fields.get("type"))

        if achievement_type == AchievementType.MEDAL.value and not fields.get("medal"):
            raise AchievementValidationError(
                "Medal achievements must specify medal type (gold, silver, bronze)"
            )
        if achievement_type == AchievementType.RECORD.value and (
            not fields.get("record_type") or not fields.get("record_value")
        ):
            raise AchievementValidationError(
                "Record achievements must specify recordType and recordValue"
            )
        if achievement_type == AchievementType.RANK.value and not fields.get("position"):
            raise AchievementValidationError("Rank achievements must specify position")

    async def record_achievement(self, request: AchievementCreate) -> AchievementResponse:
        """Record a new achievement.

        Raises:
            AchievementValidationError: If type-conditional fields are missing.
            SportNotFoundError: If sport not found.
            TeamNotFoundError: If the given team is not found.
            TeamSportMismatchError: If the team belongs to another sport.
            TournamentNotFoundError: If the given tournament is not found.
        """
        self.validate_achievement_data(request)

        async with self.store.transaction():
            await self._get_sport(request.sport_id)
            if request.team_id:
                team = await self.store.teams.find_by_id(request.team_id)
                if team is None:
                    raise TeamNotFoundError(f"Team with ID {request.team_id} not found")
                if team.sport_id != request.sport_id:
                    raise TeamSportMismatchError(
                        f"Team {request.team_id} does not belong to sport {request.sport_id}"
                    )
            if request.tournament_id:
                tournament = await self.store.tournaments.find_by_id(request.tournament_id)
                if tournament is None:
                    raise TournamentNotFoundError(
                        f"Tournament with ID {request.tournament_id} not found"
                    )

            values = {key: _plain(value) for key, value in request.model_dump().items()}
            achievement = await self.store.achievements.create(**values)
            response = AchievementResponse.model_validate(achievement)

        logger.info(
            "Recorded achievement: id=%s, student=%s, type=%s, level=%s",
            response.id,
            response.student_id,
            response.type.value,
            response.level.value,
        )
        return response

    async def update_achievement(
        self, achievement_id: str, request: AchievementUpdate
    ) -> AchievementResponse:
        """Apply a partial update and re-validate the merged achievement.

        Raises:
            AchievementNotFoundError: If achievement not found.
            AchievementValidationError: If the merged data misses a required field.
        """
        async with self.store.transaction():
            achievement = await self._get_achievement(achievement_id, for_update=True)
            changes = {
                key: _plain(value)
                for key, value in request.model_dump(exclude_unset=True).items()
            }
            self.validate_achievement_data({**achievement.to_dict(), **changes})

            achievement = await self.store.achievements.update(achievement_id, **changes)
            return AchievementResponse.model_validate(achievement)

    async def get_achievement(self, achievement_id: str) -> AchievementResponse:
        achievement = await self._get_achievement(achievement_id)
        return AchievementResponse.model_validate(achievement)

    async def get_student_achievements(self, student_id: str) -> list[AchievementResponse]:
        """A student's achievements, most recent first."""
        achievements = await self._student_achievements(student_id)
        return [AchievementResponse.model_validate(a) for a in achievements]

    async def get_achievements(
        self, filters: AchievementFilters | None = None
    ) -> list[AchievementResponse]:
        """Achievements matching the filters, most recent first."""
        filters = filters or AchievementFilters()
        criteria = []
        if filters.date_from is not None:
            criteria.append(SportsAchievement.achievement_date >= filters.date_from)
        if filters.date_to is not None:
            criteria.append(SportsAchievement.achievement_date <= filters.date_to)

        equality = filters.model_dump(
            include={"sport_id", "student_id", "team_id", "tournament_id", "type", "level"},
            exclude_none=True,
            mode="json",
        )
        achievements = await self.store.achievements.find_all(
            *criteria,
            order_by=SportsAchievement.achievement_date.desc(),
            **equality,
        )
        return [AchievementResponse.model_validate(a) for a in achievements]

    async def get_school_records(self, sport_id: str | None = None) -> list[SchoolRecord]:
        """Record achievements carrying both record details, most recent first."""
        criteria = [
            SportsAchievement.record_type.is_not(None),
            SportsAchievement.record_value.is_not(None),
        ]
        filters: dict[str, Any] = {"type": AchievementType.RECORD.value}
        if sport_id:
            filters["sport_id"] = sport_id

        achievements = await self.store.achievements.find_all(
            *criteria,
            order_by=SportsAchievement.achievement_date.desc(),
            **filters,
        )
        sports = await self._sports_by_id(a.sport_id for a in achievements)
        return [
            SchoolRecord(
                achievement_id=a.id,
                sport_id=a.sport_id,
                sport_name=sports[a.sport_id].name if sports.get(a.sport_id) else "Unknown",
                student_id=a.student_id,
                title=a.title,
                record_type=a.record_type,
                record_value=a.record_value,
                achievement_date=a.achievement_date,
            )
            for a in achievements
        ]

    async def is_eligible_for_participation_certificate(
        self, enrollment_id: str
    ) -> EligibilityResult:
        """Decide whether an enrollment qualifies for a participation certificate.

        Checks run in order: the enrollment exists, it was not withdrawn,
        attendance meets the minimum percentage and enough sessions were
        recorded.
        """
        enrollment = await self.store.enrollments.find_by_id(enrollment_id)
        if enrollment is None:
            return EligibilityResult(eligible=False, message="Enrollment not found")
        if enrollment.status == EnrollmentStatus.WITHDRAWN.value:
            return EligibilityResult(eligible=False, message="Enrollment was withdrawn")

        min_attendance = self.settings.certificate_min_attendance
        min_sessions = self.settings.certificate_min_sessions
        attendance = enrollment.attendance_percentage
        if attendance < min_attendance:
            return EligibilityResult(
                eligible=False,
                message=(
                    f"Insufficient attendance ({attendance}%). "
                    f"Minimum {min_attendance}% required."
                ),
            )
        if enrollment.total_sessions < min_sessions:
            return EligibilityResult(
                eligible=False,
                message=(
                    f"Insufficient sessions ({enrollment.total_sessions}). "
                    f"Minimum {min_sessions} sessions required."
                ),
            )

        return EligibilityResult(eligible=True, message="Eligible for participation certificate")

    async def generate_participation_certificate_data(
        self, enrollment_id: str, student_name: str
    ) -> ParticipationCertificateData:
        """Assemble the payload for a participation certificate.

        Args:
            enrollment_id: Enrollment identifier.
            student_name: Name printed on the certificate.

        Returns:
            Certificate data. completion_date is set for completed enrollments.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            SportNotFoundError: If the enrollment's sport no longer exists.
            CertificateNotAllowedError: If the enrollment was withdrawn.
        """
        enrollment = await self.store.enrollments.find_by_id(enrollment_id)
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment with ID {enrollment_id} not found")

        sport = await self.store.sports.find_by_id(enrollment.sport_id)
        if sport is None:
            raise SportNotFoundError(f"Sport details not found for enrollment {enrollment_id}")

        if enrollment.status == EnrollmentStatus.WITHDRAWN.value:
            raise CertificateNotAllowedError("Cannot generate certificate for withdrawn enrollment")

        completion_date = None
        if enrollment.status == EnrollmentStatus.COMPLETED.value:
            completion_date = ensure_utc(enrollment.updated_at)

        data = ParticipationCertificateData(
            student_id=enrollment.student_id,
            student_name=student_name,
            sport_id=sport.id,
            sport_name=sport.name,
            sport_category=format_category(sport.category),
            enrollment_date=enrollment.enrollment_date,
            completion_date=completion_date,
            attendance_percentage=enrollment.attendance_percentage,
            total_sessions=enrollment.total_sessions,
            academic_year=await self._academic_year_label(sport),
            remarks=enrollment.remarks,
        )

        logger.info(
            "Participation certificate data generated: enrollment=%s, sport=%s, attendance=%d",
            enrollment_id,
            sport.name,
            data.attendance_percentage,
        )
        return data

    async def generate_achievement_certificate_data(
        self, achievement_id: str, student_name: str
    ) -> AchievementCertificateData:
        """Assemble the payload for an achievement certificate.

        Raises:
            AchievementNotFoundError: If achievement not found.
            SportNotFoundError: If the achievement's sport no longer exists.
        """
        achievement = await self._get_achievement(achievement_id)
        sport = await self.store.sports.find_by_id(achievement.sport_id)
        if sport is None:
            raise SportNotFoundError(f"Sport details not found for achievement {achievement_id}")

        tournament = None
        if achievement.tournament_id:
            tournament = await self.store.tournaments.find_by_id(achievement.tournament_id)

        data = AchievementCertificateData(
            student_id=achievement.student_id,
            student_name=student_name,
            achievement_id=achievement.id,
            sport_id=sport.id,
            sport_name=sport.name,
            achievement_title=achievement.title,
            achievement_type=format_achievement_type(achievement.type),
            achievement_level=format_achievement_level(achievement.level),
            position=achievement.position,
            medal=achievement.medal,
            record_type=achievement.record_type,
            record_value=achievement.record_value,
            tournament_name=tournament.name if tournament else None,
            achievement_date=achievement.achievement_date,
            description=achievement.description,
        )

        logger.info(
            "Achievement certificate data generated: achievement=%s, level=%s",
            achievement_id,
            achievement.level,
        )
        return data

    async def get_student_participation_certificates(
        self, student_id: str, student_name: str
    ) -> list[ParticipationCertificateData]:
        """Certificate data for every completed enrollment of a student.

        Enrollments whose data cannot be assembled are logged and skipped.
        """
        enrollments = await self.store.enrollments.find_all(
            order_by=SportsEnrollment.enrollment_date,
            student_id=student_id,
            status=EnrollmentStatus.COMPLETED.value,
        )
        enrollment_ids = [e.id for e in enrollments]

        certificates = []
        for enrollment_id in enrollment_ids:
            try:
                certificates.append(
                    await self.generate_participation_certificate_data(enrollment_id, student_name)
                )
            except Exception as e:
                logger.warning(
                    "Failed to generate certificate for enrollment %s: %s", enrollment_id, e
                )

        logger.info(
            "Student participation certificates: student=%s, count=%d",
            student_id,
            len(certificates),
        )
        return certificates

    async def get_student_achievement_certificates(
        self, student_id: str, student_name: str
    ) -> list[AchievementCertificateData]:
        """Certificate data for every achievement of a student, skipping failures."""
        achievement_ids = [a.id for a in await self._student_achievements(student_id)]

        certificates = []
        for achievement_id in achievement_ids:
            try:
                certificates.append(
                    await self.generate_achievement_certificate_data(achievement_id, student_name)
                )
            except Exception as e:
                logger.warning(
                    "Failed to generate certificate for achievement %s: %s", achievement_id, e
                )
        return certificates

    async def get_student_sports_for_cv(self, student_id: str) -> StudentSportsCV:
        """Build the sports section of a student's CV.

        Participations are newest first with their duration in words.
        average_attendance is the whole-number mean over all enrollments,
        including those with no sessions.
        """
        enrollments = await self.store.enrollments.find_all(
            order_by=[SportsEnrollment.enrollment_date.desc(), SportsEnrollment.created_at.desc()],
            student_id=student_id,
        )
        achievements = await self._student_achievements(student_id)
        sports = await self._sports_by_id(
            [e.sport_id for e in enrollments] + [a.sport_id for a in achievements]
        )

        participations = []
        for enrollment in enrollments:
            sport = sports.get(enrollment.sport_id)
            months = months_between(enrollment.enrollment_date, enrollment.updated_at)
            participations.append(
                CVParticipation(
                    sport_name=sport.name if sport else "Unknown",
                    category=format_category(sport.category if sport else None),
                    duration=months_to_human(months),
                    attendance_percentage=enrollment.attendance_percentage,
                    status=enrollment.status,
                )
            )

        achievement_rows = []
        for achievement in achievements:
            sport = sports.get(achievement.sport_id)
            achievement_rows.append(
                CVAchievement(
                    title=achievement.display_title,
                    sport_name=sport.name if sport else "Unknown",
                    type=format_achievement_type(achievement.type),
                    level=format_achievement_level(achievement.level),
                    position=achievement.position,
                    medal=achievement.medal,
                    achievement_date=achievement.achievement_date,
                )
            )

        average_attendance = 0
        if enrollments:
            total = sum(e.attendance_percentage for e in enrollments)
            average_attendance = int(round_half_up(total / len(enrollments)))

        high_levels = self.settings.high_level_achievement_levels
        summary = CVSummary(
            total_sports=len(enrollments),
            total_achievements=len(achievements),
            high_level_achievements=sum(1 for a in achievements if a.is_high_level(high_levels)),
            medal_count=count_medals(achievements),
            records_set=sum(1 for a in achievements if a.is_record),
            average_attendance=average_attendance,
        )

        logger.info(
            "Student sports CV generated: student=%s, sports=%d, achievements=%d",
            student_id,
            summary.total_sports,
            summary.total_achievements,
        )
        return StudentSportsCV(
            student_id=student_id,
            participations=participations,
            achievements=achievement_rows,
            summary=summary,
        )

    async def _student_achievements(self, student_id: str) -> list[SportsAchievement]:
        return await self.store.achievements.find_all(
            order_by=[SportsAchievement.achievement_date.desc(), SportsAchievement.created_at.desc()],
            student_id=student_id,
        )

    async def _sports_by_id(self, sport_ids) -> dict[str, Sport | None]:
        sports: dict[str, Sport | None] = {}
        for sport_id in sport_ids:
            if sport_id not in sports:
                sports[sport_id] = await self.store.sports.find_by_id(sport_id)
        return sports

    async def _academic_year_label(self, sport: Sport) -> str:
        if not sport.academic_year_id:
            return UNKNOWN_ACADEMIC_YEAR
        academic_year = await self.store.academic_years.find_by_id(sport.academic_year_id)
        if academic_year is None:
            return f"Academic Year {sport.academic_year_id}"
        return academic_year.name

    async def _get_sport(self, sport_id: str) -> Sport:
        sport = await self.store.sports.find_by_id(sport_id)
        if sport is None:
            raise SportNotFoundError(f"Sport with ID {sport_id} not found")
        return sport

    async def _get_achievement(self, achievement_id: str, for_update: bool = False) -> SportsAchievement:
        achievement = await self.store.achievements.find_by_id(achievement_id, for_update=for_update)
        if achievement is None:
            raise AchievementNotFoundError(f"Achievement with ID {achievement_id} not found")
        return achievement
