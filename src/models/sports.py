# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sports program schemas.

This module defines the closed status and classification enums, the
request models accepted by the sports services and the response models
they return. Responses are built from ORM rows with from_attributes so
they stay valid after the session expires those rows.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.models.common import PaginationMeta
from src.utils.datetime import ensure_utc


# ============================================================================
# Enums
# ============================================================================


class SportCategory(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"
    TRADITIONAL = "traditional"


class ActivityStatus(str, Enum):
    """Status of a sport or team."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    WITHDRAWN = "withdrawn"
    COMPLETED = "completed"


class TournamentType(str, Enum):
    INTER_SCHOOL = "inter_school"
    INTRA_SCHOOL = "intra_school"
    DISTRICT = "district"
    REGIONAL = "regional"
    NATIONAL = "national"


class TournamentStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AchievementType(str, Enum):
    MEDAL = "medal"
    TROPHY = "trophy"
    CERTIFICATE = "certificate"
    RANK = "rank"
    RECORD = "record"
    RECOGNITION = "recognition"


class AchievementLevel(str, Enum):
    SCHOOL = "school"
    INTER_SCHOOL = "inter_school"
    DISTRICT = "district"
    REGIONAL = "regional"
    NATIONAL = "national"
    INTERNATIONAL = "international"


class MedalType(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"


class CompetitorKind(str, Enum):
    """Whether a tally belongs to a team or an individual participant."""

    TEAM = "team"
    PARTICIPANT = "participant"


class BulkPolicy(str, Enum):
    """Failure handling for bulk operations.

    PARTIAL isolates per-item failures and returns the successes.
    FAIL_FAST aborts the whole call, applying nothing, on the first failure.
    """

    PARTIAL = "partial"
    FAIL_FAST = "fail_fast"


# ============================================================================
# Requests
# ============================================================================


class TeamCreate(BaseModel):
    """Request to create a team under a sport."""

    sport_id: str
    name: str = Field(min_length=1, max_length=100)
    captain_id: str | None = None
    coach_id: str | None = None
    academic_year_id: str | None = None
    remarks: str | None = None


class EnrollmentCreate(BaseModel):
    """Request to enroll a student in a sport.

    enrollment_date defaults to today when omitted.
    """

    sport_id: str
    student_id: str
    team_id: str | None = None
    enrollment_date: date | None = None
    remarks: str | None = None


class EnrollmentFilters(BaseModel):
    sport_id: str | None = None
    student_id: str | None = None
    team_id: str | None = None
    status: EnrollmentStatus | None = None
    enrollment_date_from: date | None = None
    enrollment_date_to: date | None = None


class AttendanceMark(BaseModel):
    """One item of a bulk attendance request."""

    enrollment_id: str
    present: bool


class TournamentCreate(BaseModel):
    """Request to create a tournament."""

    sport_id: str
    name: str = Field(min_length=1, max_length=200)
    type: TournamentType
    start_date: date
    end_date: date
    venue: str | None = None
    description: str | None = None
    remarks: str | None = None


class TournamentUpdate(BaseModel):
    """Partial update of tournament details. Status has its own operation."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: TournamentType | None = None
    start_date: date | None = None
    end_date: date | None = None
    venue: str | None = None
    description: str | None = None
    remarks: str | None = None


class TournamentFilters(BaseModel):
    sport_id: str | None = None
    type: TournamentType | None = None
    status: TournamentStatus | None = None
    start_date_from: date | None = None
    start_date_to: date | None = None
    venue: str | None = None


class MatchCreate(BaseModel):
    """A match to append to a tournament schedule.

    Exactly one pairing must be given in full: both team ids or both
    participant ids. The stored record uses the key "date" for the match
    date; either name is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    match_id: str = Field(min_length=1)
    match_date: date = Field(alias="date")
    team1_id: str | None = None
    team2_id: str | None = None
    participant1_id: str | None = None
    participant2_id: str | None = None
    remarks: str | None = None

    @model_validator(mode="after")
    def check_pairing(self) -> "MatchCreate":
        team_ids = (self.team1_id, self.team2_id)
        participant_ids = (self.participant1_id, self.participant2_id)
        has_teams = any(team_ids)
        has_participants = any(participant_ids)

        if has_teams and has_participants:
            raise ValueError("A match is paired by teams or by participants, not both")
        if not has_teams and not has_participants:
            raise ValueError("A match must specify two teams or two participants")

        sides = team_ids if has_teams else participant_ids
        if not all(sides):
            raise ValueError("A match pairing must name both sides")
        if sides[0] == sides[1]:
            raise ValueError("A match cannot pair a side with itself")
        return self

    @property
    def is_team_match(self) -> bool:
        return self.team1_id is not None

    @property
    def sides(self) -> tuple[str, str]:
        if self.is_team_match:
            return self.team1_id, self.team2_id
        return self.participant1_id, self.participant2_id


class Match(MatchCreate):
    """A scheduled match, including any recorded result."""

    score1: str | None = None
    score2: str | None = None
    winner_id: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Serialize for storage in Tournament.schedule."""
        return self.model_dump(mode="json", by_alias=True)


class MatchResultInput(BaseModel):
    """Result fields to merge into a match. Only fields supplied are merged."""

    score1: str | None = None
    score2: str | None = None
    winner_id: str | None = None
    remarks: str | None = None


class AchievementCreate(BaseModel):
    """Request to record an achievement.

    Type-conditional fields (medal, record details, position) are checked
    by the achievement service.
    """

    sport_id: str
    student_id: str
    team_id: str | None = None
    tournament_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    type: AchievementType
    level: AchievementLevel
    position: str | None = None
    medal: MedalType | None = None
    record_type: str | None = None
    record_value: str | None = None
    description: str | None = None
    achievement_date: date
    certificate_url: str | None = None
    photo_url: str | None = None
    remarks: str | None = None


class AchievementUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    type: AchievementType | None = None
    level: AchievementLevel | None = None
    position: str | None = None
    medal: MedalType | None = None
    record_type: str | None = None
    record_value: str | None = None
    description: str | None = None
    achievement_date: date | None = None
    certificate_url: str | None = None
    photo_url: str | None = None
    remarks: str | None = None


class AchievementFilters(BaseModel):
    sport_id: str | None = None
    student_id: str | None = None
    team_id: str | None = None
    tournament_id: str | None = None
    type: AchievementType | None = None
    level: AchievementLevel | None = None
    date_from: date | None = None
    date_to: date | None = None


# ============================================================================
# Responses
# ============================================================================


class _RowResponse(BaseModel):
    """Base for responses built from ORM rows."""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at", mode="after", check_fields=False)
    @classmethod
    def as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class SportResponse(_RowResponse):
    id: str
    name: str
    category: SportCategory
    description: str | None = None
    coordinator_id: str | None = None
    academic_year_id: str | None = None
    status: ActivityStatus
    created_at: datetime
    updated_at: datetime


class TeamResponse(_RowResponse):
    id: str
    sport_id: str
    name: str
    captain_id: str | None = None
    coach_id: str | None = None
    academic_year_id: str | None = None
    members: list[str]
    status: ActivityStatus
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime


class EnrollmentResponse(_RowResponse):
    id: str
    sport_id: str
    student_id: str
    team_id: str | None = None
    enrollment_date: date
    status: EnrollmentStatus
    attendance_count: int
    total_sessions: int
    attendance_percentage: int
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime


class TournamentResponse(_RowResponse):
    id: str
    sport_id: str
    name: str
    type: TournamentType
    description: str | None = None
    start_date: date
    end_date: date
    venue: str | None = None
    status: TournamentStatus
    teams: list[str]
    participants: list[str]
    schedule: list[Match]
    photos: list[str]
    videos: list[str]
    remarks: str | None = None
    team_count: int
    participant_count: int
    match_count: int
    created_at: datetime
    updated_at: datetime


class AchievementResponse(_RowResponse):
    id: str
    sport_id: str
    student_id: str
    team_id: str | None = None
    tournament_id: str | None = None
    title: str
    display_title: str
    type: AchievementType
    level: AchievementLevel
    position: str | None = None
    medal: MedalType | None = None
    record_type: str | None = None
    record_value: str | None = None
    description: str | None = None
    achievement_date: date
    certificate_url: str | None = None
    photo_url: str | None = None
    remarks: str | None = None
    is_medal: bool
    is_record: bool
    is_team_achievement: bool
    medal_points: int
    created_at: datetime
    updated_at: datetime


class EnrollmentPage(BaseModel):
    items: list[EnrollmentResponse]
    pagination: PaginationMeta


class TournamentPage(BaseModel):
    items: list[TournamentResponse]
    pagination: PaginationMeta


class EligibilityResult(BaseModel):
    """Outcome of a read-only precheck, with the reason when negative."""

    eligible: bool
    message: str | None = None


class EnrollmentStats(BaseModel):
    total: int
    active: int
    withdrawn: int
    completed: int
    average_attendance: float


class ParticipationRow(BaseModel):
    enrollment_id: str
    sport_id: str
    sport_name: str
    team_id: str | None = None
    team_name: str | None = None
    status: EnrollmentStatus
    attendance_percentage: int
    enrollment_date: date


class ParticipationSummary(BaseModel):
    student_id: str
    total: int
    active: int
    completed: int
    average_attendance: float
    sports: list[ParticipationRow]


class TournamentStats(BaseModel):
    total: int
    scheduled: int
    ongoing: int
    completed: int
    cancelled: int
    total_matches: int
    average_matches: float


class MedalCount(BaseModel):
    gold: int = 0
    silver: int = 0
    bronze: int = 0


class SportAchievementStats(BaseModel):
    total: int
    by_type: dict[str, int]
    by_level: dict[str, int]
    medal_count: MedalCount
    record_count: int


class SchoolRecord(BaseModel):
    achievement_id: str
    sport_id: str
    sport_name: str
    student_id: str
    title: str
    record_type: str
    record_value: str
    achievement_date: date


class ParticipationCertificateData(BaseModel):
    """Payload for rendering a participation certificate."""

    student_id: str
    student_name: str
    sport_id: str
    sport_name: str
    sport_category: str
    enrollment_date: date
    completion_date: datetime | None = None
    attendance_percentage: int
    total_sessions: int
    academic_year: str
    remarks: str | None = None


class AchievementCertificateData(BaseModel):
    """Payload for rendering an achievement certificate."""

    student_id: str
    student_name: str
    achievement_id: str
    sport_id: str
    sport_name: str
    achievement_title: str
    achievement_type: str
    achievement_level: str
    position: str | None = None
    medal: str | None = None
    record_type: str | None = None
    record_value: str | None = None
    tournament_name: str | None = None
    achievement_date: date
    description: str | None = None


class CVParticipation(BaseModel):
    sport_name: str
    category: str
    duration: str
    attendance_percentage: int
    status: EnrollmentStatus


class CVAchievement(BaseModel):
    title: str
    sport_name: str
    type: str
    level: str
    position: str | None = None
    medal: str | None = None
    achievement_date: date


class CVSummary(BaseModel):
    total_sports: int
    total_achievements: int
    high_level_achievements: int
    medal_count: MedalCount
    records_set: int
    average_attendance: int


class StudentSportsCV(BaseModel):
    """Sports section of a student's CV."""

    student_id: str
    participations: list[CVParticipation]
    achievements: list[CVAchievement]
    summary: CVSummary
