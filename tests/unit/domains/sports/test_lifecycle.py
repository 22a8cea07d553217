# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for status transition tables."""

import pytest

from src.domains.sports.errors import InvalidStateTransitionError, SportsValidationError
from src.domains.sports.lifecycle import (
    ENROLLMENT_TRANSITIONS,
    TOURNAMENT_TRANSITIONS,
    can_transition,
    ensure_enrollment_transition,
    ensure_tournament_transition,
    is_terminal,
)
from src.models.sports import EnrollmentStatus, TournamentStatus


class TestEnrollmentTransitions:
    """Tests for the enrollment table."""

    @pytest.mark.parametrize("target", [EnrollmentStatus.WITHDRAWN, EnrollmentStatus.COMPLETED])
    def test_active_can_end(self, target):
        assert ensure_enrollment_transition("active", target) is target

    @pytest.mark.parametrize("current", [EnrollmentStatus.WITHDRAWN, EnrollmentStatus.COMPLETED])
    @pytest.mark.parametrize("target", list(EnrollmentStatus))
    def test_terminal_statuses_reject_everything(self, current, target):
        assert is_terminal(ENROLLMENT_TRANSITIONS, current)
        with pytest.raises(InvalidStateTransitionError):
            ensure_enrollment_transition(current, target)

    def test_same_status_is_rejected(self):
        assert not can_transition(
            ENROLLMENT_TRANSITIONS, EnrollmentStatus.ACTIVE, EnrollmentStatus.ACTIVE
        )

    def test_error_carries_statuses(self):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            ensure_enrollment_transition("withdrawn", "active")

        error = exc_info.value
        assert error.entity == "enrollment"
        assert error.current == "withdrawn"
        assert error.target == "active"
        assert str(error) == "Cannot change enrollment status from withdrawn to active"

    def test_custom_message(self):
        with pytest.raises(InvalidStateTransitionError, match="Enrollment is already withdrawn"):
            ensure_enrollment_transition(
                "withdrawn", "withdrawn", "Enrollment is already withdrawn"
            )


class TestTournamentTransitions:
    """Tests for the tournament table."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (TournamentStatus.SCHEDULED, TournamentStatus.ONGOING),
            (TournamentStatus.SCHEDULED, TournamentStatus.CANCELLED),
            (TournamentStatus.ONGOING, TournamentStatus.COMPLETED),
            (TournamentStatus.ONGOING, TournamentStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        assert ensure_tournament_transition(current.value, target.value) is target

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (TournamentStatus.SCHEDULED, TournamentStatus.COMPLETED),
            (TournamentStatus.ONGOING, TournamentStatus.SCHEDULED),
            (TournamentStatus.SCHEDULED, TournamentStatus.SCHEDULED),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidStateTransitionError):
            ensure_tournament_transition(current, target)

    @pytest.mark.parametrize("current", [TournamentStatus.COMPLETED, TournamentStatus.CANCELLED])
    @pytest.mark.parametrize("target", list(TournamentStatus))
    def test_terminal_statuses_reject_everything(self, current, target):
        assert is_terminal(TOURNAMENT_TRANSITIONS, current)
        with pytest.raises(InvalidStateTransitionError):
            ensure_tournament_transition(current, target)

    def test_unknown_target_status(self):
        with pytest.raises(SportsValidationError, match="postponed"):
            ensure_tournament_transition("scheduled", "postponed")

    def test_unknown_current_status(self):
        with pytest.raises(SportsValidationError, match="Unknown enrollment status"):
            ensure_enrollment_transition("paused", EnrollmentStatus.WITHDRAWN)
