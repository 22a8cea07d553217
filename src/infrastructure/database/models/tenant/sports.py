# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sports program models.

Tables:
- sports: Sports offered by the school
- teams: Teams within a sport, with a cached member list
- sports_enrollments: A student's registration in a sport
- tournaments: Competitions with embedded match schedule
- sports_achievements: Medals, trophies, records and other recognitions

Status columns hold the string values of the enums in src.models.sports.
Relationships are not mapped; services load related rows explicitly.
"""

from datetime import date
from typing import Any, Iterable

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.numbers import percentage

MEDAL_POINTS = {"gold": 3, "silver": 2, "bronze": 1}


class Sport(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A sport offered by the school."""

    __tablename__ = "sports"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    coordinator_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    academic_year_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("academic_years.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<Sport(id={self.id}, name={self.name})>"


class Team(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A team within a sport.

    ``members`` is a cache of the student ids of active enrollments
    pointing at this team. Always assign a new list; in-place mutation
    of the JSON value is not tracked.
    """

    __tablename__ = "teams"

    sport_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("sports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    captain_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    coach_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    academic_year_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def member_count(self) -> int:
        return len(self.members or [])

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name={self.name}, sport_id={self.sport_id})>"


class SportsEnrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's enrollment in a sport.

    At most one active row may exist per (sport_id, student_id); the
    partial unique index enforces it on both PostgreSQL and SQLite.
    """

    __tablename__ = "sports_enrollments"
    __table_args__ = (
        CheckConstraint("attendance_count >= 0", name="ck_sports_enrollments_attendance_nonneg"),
        CheckConstraint(
            "attendance_count <= total_sessions",
            name="ck_sports_enrollments_attendance_le_sessions",
        ),
        Index(
            "uq_sports_enrollments_active_student",
            "sport_id",
            "student_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    sport_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("sports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    team_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    attendance_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def attendance_percentage(self) -> int:
        """Attendance rounded half-up to a whole percent, 0 without sessions."""
        return percentage(self.attendance_count, self.total_sessions)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self) -> str:
        return (
            f"<SportsEnrollment(id={self.id}, sport_id={self.sport_id}, "
            f"student_id={self.student_id}, status={self.status})>"
        )


class Tournament(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A competition for one sport.

    ``schedule`` is an ordered list of match objects::

        {"match_id": "m1", "date": "2025-03-05", "team1_id": ..., "team2_id": ...,
         "participant1_id": None, "participant2_id": None,
         "score1": None, "score2": None, "winner_id": None, "remarks": None}

    JSON list columns must be replaced, never mutated in place.
    """

    __tablename__ = "tournaments"

    sport_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("sports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    venue: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    teams: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    participants: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    schedule: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    videos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def team_count(self) -> int:
        return len(self.teams or [])

    @property
    def participant_count(self) -> int:
        return len(self.participants or [])

    @property
    def match_count(self) -> int:
        return len(self.schedule or [])

    def __repr__(self) -> str:
        return f"<Tournament(id={self.id}, name={self.name}, status={self.status})>"


class SportsAchievement(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A recognition earned by a student in a sport."""

    __tablename__ = "sports_achievements"

    sport_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("sports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    team_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True,
    )
    tournament_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("tournaments.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[str | None] = mapped_column(String(50), nullable=True)
    medal: Mapped[str | None] = mapped_column(String(10), nullable=True)
    record_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    record_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    achievement_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    certificate_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    def is_high_level(self, high_levels: Iterable[str]) -> bool:
        return self.level in set(high_levels)

    @property
    def is_medal(self) -> bool:
        return self.type == "medal" and self.medal is not None

    @property
    def is_record(self) -> bool:
        return self.type == "record"

    @property
    def is_team_achievement(self) -> bool:
        return self.team_id is not None

    @property
    def display_title(self) -> str:
        """Title decorated with medal, position and record details."""
        title = self.title
        if self.medal:
            title = f"{self.medal.capitalize()} Medal - {title}"
        elif self.position:
            title = f"{title} - {self.position}"
        if self.record_type and self.record_value:
            title = f"{title} ({self.record_type}: {self.record_value})"
        return title

    @property
    def medal_points(self) -> int:
        if not self.is_medal:
            return 0
        return MEDAL_POINTS.get(self.medal, 0)

    def __repr__(self) -> str:
        return f"<SportsAchievement(id={self.id}, title={self.title}, type={self.type})>"
