# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create sports program tables.

Tables: academic_years, sports, teams, sports_enrollments, tournaments,
sports_achievements. Column types are portable so the same revision runs
on PostgreSQL and SQLite.

Revision ID: 001_create_sports_tables
Revises: None
Create Date: 2025-03-01
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_create_sports_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = ("sports",)
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create sports program tables."""
    op.create_table(
        "academic_years",
        _id_column(),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("is_current", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "sports",
        _id_column(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("coordinator_id", sa.String(36), nullable=True),
        sa.Column(
            "academic_year_id",
            sa.String(36),
            sa.ForeignKey("academic_years.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        *_timestamps(),
    )

    op.create_table(
        "teams",
        _id_column(),
        sa.Column(
            "sport_id",
            sa.String(36),
            sa.ForeignKey("sports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("captain_id", sa.String(36), nullable=True),
        sa.Column("coach_id", sa.String(36), nullable=True),
        sa.Column("academic_year_id", sa.String(36), nullable=True),
        sa.Column("members", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_teams_sport_id", "teams", ["sport_id"])

    op.create_table(
        "sports_enrollments",
        _id_column(),
        sa.Column(
            "sport_id",
            sa.String(36),
            sa.ForeignKey("sports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column(
            "team_id",
            sa.String(36),
            sa.ForeignKey("teams.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("enrollment_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("attendance_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_sessions", sa.Integer, nullable=False, server_default="0"),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "attendance_count >= 0", name="ck_sports_enrollments_attendance_nonneg"
        ),
        sa.CheckConstraint(
            "attendance_count <= total_sessions",
            name="ck_sports_enrollments_attendance_le_sessions",
        ),
    )
    op.create_index("ix_sports_enrollments_sport_id", "sports_enrollments", ["sport_id"])
    op.create_index("ix_sports_enrollments_student_id", "sports_enrollments", ["student_id"])
    op.create_index("ix_sports_enrollments_team_id", "sports_enrollments", ["team_id"])
    # One active enrollment per (sport, student)
    op.create_index(
        "uq_sports_enrollments_active_student",
        "sports_enrollments",
        ["sport_id", "student_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "tournaments",
        _id_column(),
        sa.Column(
            "sport_id",
            sa.String(36),
            sa.ForeignKey("sports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("venue", sa.String(200), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("teams", sa.JSON, nullable=False),
        sa.Column("participants", sa.JSON, nullable=False),
        sa.Column("schedule", sa.JSON, nullable=False),
        sa.Column("photos", sa.JSON, nullable=False),
        sa.Column("videos", sa.JSON, nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tournaments_sport_id", "tournaments", ["sport_id"])
    op.create_index("ix_tournaments_start_date", "tournaments", ["start_date"])

    op.create_table(
        "sports_achievements",
        _id_column(),
        sa.Column(
            "sport_id",
            sa.String(36),
            sa.ForeignKey("sports.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column(
            "team_id",
            sa.String(36),
            sa.ForeignKey("teams.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "tournament_id",
            sa.String(36),
            sa.ForeignKey("tournaments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("position", sa.String(50), nullable=True),
        sa.Column("medal", sa.String(10), nullable=True),
        sa.Column("record_type", sa.String(100), nullable=True),
        sa.Column("record_value", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("achievement_date", sa.Date, nullable=False),
        sa.Column("certificate_url", sa.String(500), nullable=True),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_sports_achievements_sport_id", "sports_achievements", ["sport_id"])
    op.create_index("ix_sports_achievements_student_id", "sports_achievements", ["student_id"])
    op.create_index(
        "ix_sports_achievements_achievement_date", "sports_achievements", ["achievement_date"]
    )


def downgrade() -> None:
    """Drop sports program tables."""
    op.drop_table("sports_achievements")
    op.drop_table("tournaments")
    op.drop_index("uq_sports_enrollments_active_student", table_name="sports_enrollments")
    op.drop_table("sports_enrollments")
    op.drop_table("teams")
    op.drop_table("sports")
    op.drop_table("academic_years")
