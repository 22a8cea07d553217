# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sports program domain package.

This package provides the sports program functionality including:
- Enrollment lifecycle and attendance tracking
- Team rosters kept in step with enrollments
- Tournament scheduling and match results
- Statistics, certificate eligibility and certificate data
"""

from src.domains.sports.achievement import SportsAchievementService
from src.domains.sports.enrollment import SportsEnrollmentService
from src.domains.sports.errors import (
    AchievementNotFoundError,
    AchievementValidationError,
    AlreadyEnrolledError,
    BusinessRuleViolationError,
    CertificateNotAllowedError,
    EnrollmentNotActiveError,
    EnrollmentNotFoundError,
    InactiveSportError,
    InactiveTeamError,
    InvalidDateRangeError,
    InvalidStateTransitionError,
    InvalidWinnerError,
    MatchNotFoundError,
    MatchScheduleError,
    SportNotFoundError,
    SportsNotFoundError,
    SportsServiceError,
    SportsValidationError,
    TeamNotFoundError,
    TeamSportMismatchError,
    TournamentClosedError,
    TournamentNotFoundError,
)
from src.domains.sports.results import CompetitorTally, MatchResultService, tally_matches
from src.domains.sports.roster import TeamRoster
from src.domains.sports.statistics import SportsStatisticsService
from src.domains.sports.tournament import TournamentService

__all__ = [
    # Services
    "SportsEnrollmentService",
    "TeamRoster",
    "TournamentService",
    "MatchResultService",
    "SportsStatisticsService",
    "SportsAchievementService",
    # Tallies
    "CompetitorTally",
    "tally_matches",
    # Errors
    "SportsServiceError",
    "SportsNotFoundError",
    "SportNotFoundError",
    "TeamNotFoundError",
    "EnrollmentNotFoundError",
    "TournamentNotFoundError",
    "MatchNotFoundError",
    "AchievementNotFoundError",
    "SportsValidationError",
    "InvalidDateRangeError",
    "MatchScheduleError",
    "TeamSportMismatchError",
    "AchievementValidationError",
    "InvalidStateTransitionError",
    "EnrollmentNotActiveError",
    "TournamentClosedError",
    "BusinessRuleViolationError",
    "AlreadyEnrolledError",
    "InactiveSportError",
    "InactiveTeamError",
    "CertificateNotAllowedError",
    "InvalidWinnerError",
]
