# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School database models."""

from src.infrastructure.database.models.tenant.school import AcademicYear
from src.infrastructure.database.models.tenant.sports import (
    Sport,
    SportsAchievement,
    SportsEnrollment,
    Team,
    Tournament,
)

__all__ = [
    "AcademicYear",
    "Sport",
    "Team",
    "SportsEnrollment",
    "Tournament",
    "SportsAchievement",
]
