# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the sports services.

Four kinds, each with its own base so callers can map them to responses:
not-found, validation, invalid state transition and business rule.
"""


class SportsServiceError(Exception):
    """Base exception for sports service errors."""

    pass


# Not found


class SportsNotFoundError(SportsServiceError):
    """Raised when a referenced entity does not exist."""

    pass


class SportNotFoundError(SportsNotFoundError):
    """Raised when sport is not found."""

    pass


class TeamNotFoundError(SportsNotFoundError):
    """Raised when team is not found."""

    pass


class EnrollmentNotFoundError(SportsNotFoundError):
    """Raised when enrollment is not found."""

    pass


class TournamentNotFoundError(SportsNotFoundError):
    """Raised when tournament is not found."""

    pass


class MatchNotFoundError(SportsNotFoundError):
    """Raised when a match id is not in the tournament schedule."""

    pass


class AchievementNotFoundError(SportsNotFoundError):
    """Raised when achievement is not found."""

    pass


# Validation


class SportsValidationError(SportsServiceError):
    """Raised when input is malformed or logically inconsistent."""

    pass


class InvalidDateRangeError(SportsValidationError):
    """Raised when dates are out of order or in the past."""

    pass


class MatchScheduleError(SportsValidationError):
    """Raised when a match falls outside the tournament or names non-members."""

    pass


class TeamSportMismatchError(SportsValidationError):
    """Raised when a team belongs to a different sport."""

    pass


class AchievementValidationError(SportsValidationError):
    """Raised when type-conditional achievement fields are missing."""

    pass


# State


class InvalidStateTransitionError(SportsServiceError):
    """Raised when an entity's status forbids the requested change.

    Attributes:
        entity: Entity name, e.g. "enrollment".
        current: Current status value.
        target: Requested status value.
    """

    def __init__(self, entity: str, current: str, target: str, message: str | None = None) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot change {entity} status from {current} to {target}"
        )


class EnrollmentNotActiveError(InvalidStateTransitionError):
    """Raised when an operation needs an active enrollment."""

    def __init__(self, current: str, message: str | None = None) -> None:
        super().__init__(
            "enrollment",
            current,
            "active",
            message or f"Enrollment is not active (status: {current})",
        )


class TournamentClosedError(InvalidStateTransitionError):
    """Raised when a completed or cancelled tournament is modified."""

    def __init__(self, current: str, message: str | None = None) -> None:
        super().__init__(
            "tournament",
            current,
            current,
            message or f"Tournament is {current} and can no longer be changed",
        )


# Business rules


class BusinessRuleViolationError(SportsServiceError):
    """Raised when a request breaks a program rule."""

    pass


class AlreadyEnrolledError(BusinessRuleViolationError):
    """Raised when student already has an active enrollment in the sport."""

    pass


class InactiveSportError(BusinessRuleViolationError):
    """Raised when sport is not active."""

    pass


class InactiveTeamError(BusinessRuleViolationError):
    """Raised when team is not active."""

    pass


class CertificateNotAllowedError(BusinessRuleViolationError):
    """Raised when a certificate is requested for a withdrawn enrollment."""

    pass


class InvalidWinnerError(SportsValidationError, BusinessRuleViolationError):
    """Raised when a declared winner is not one of the match's sides."""

    pass
