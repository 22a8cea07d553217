# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.infrastructure.database.models.tenant import (
    AcademicYear,
    Sport,
    SportsAchievement,
    SportsEnrollment,
    Team,
    Tournament,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "AcademicYear",
    "Sport",
    "Team",
    "SportsEnrollment",
    "Tournament",
    "SportsAchievement",
]
