# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Status transition tables for enrollments and tournaments.

Every status change goes through ensure_transition(). A status absent
from a table, or mapped to an empty set, is terminal. Requesting the
current status again is not a transition and is rejected.
"""

from enum import Enum
from typing import Mapping, TypeVar

from src.domains.sports.errors import InvalidStateTransitionError, SportsValidationError
from src.models.sports import EnrollmentStatus, TournamentStatus

StatusT = TypeVar("StatusT", bound=Enum)

ENROLLMENT_TRANSITIONS: Mapping[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.ACTIVE: frozenset(
        {EnrollmentStatus.WITHDRAWN, EnrollmentStatus.COMPLETED}
    ),
    EnrollmentStatus.WITHDRAWN: frozenset(),
    EnrollmentStatus.COMPLETED: frozenset(),
}

TOURNAMENT_TRANSITIONS: Mapping[TournamentStatus, frozenset[TournamentStatus]] = {
    TournamentStatus.SCHEDULED: frozenset(
        {TournamentStatus.ONGOING, TournamentStatus.CANCELLED}
    ),
    TournamentStatus.ONGOING: frozenset(
        {TournamentStatus.COMPLETED, TournamentStatus.CANCELLED}
    ),
    TournamentStatus.COMPLETED: frozenset(),
    TournamentStatus.CANCELLED: frozenset(),
}


def can_transition(
    table: Mapping[StatusT, frozenset[StatusT]],
    current: StatusT,
    target: StatusT,
) -> bool:
    return target in table.get(current, frozenset())


def is_terminal(table: Mapping[StatusT, frozenset[StatusT]], status: StatusT) -> bool:
    return not table.get(status)


def ensure_transition(
    entity: str,
    table: Mapping[StatusT, frozenset[StatusT]],
    current: StatusT | str,
    target: StatusT | str,
    message: str | None = None,
) -> StatusT:
    """Validate a status change against a transition table.

    Args:
        entity: Entity name used in the error.
        table: Transition table for the entity.
        current: Current status (enum or its value).
        target: Requested status (enum or its value).
        message: Optional error message overriding the default.

    Returns:
        The target status as an enum member.

    Raises:
        SportsValidationError: If either status is not a known value.
        InvalidStateTransitionError: If the table does not allow it.
    """
    status_type = type(next(iter(table)))
    try:
        current_status = status_type(current)
        target_status = status_type(target)
    except ValueError as e:
        raise SportsValidationError(f"Unknown {entity} status: {e}") from e
    if not can_transition(table, current_status, target_status):
        raise InvalidStateTransitionError(
            entity, current_status.value, target_status.value, message
        )
    return target_status


def ensure_enrollment_transition(
    current: EnrollmentStatus | str,
    target: EnrollmentStatus | str,
    message: str | None = None,
) -> EnrollmentStatus:
    return ensure_transition("enrollment", ENROLLMENT_TRANSITIONS, current, target, message)


def ensure_tournament_transition(
    current: TournamentStatus | str,
    target: TournamentStatus | str,
    message: str | None = None,
) -> TournamentStatus:
    return ensure_transition("tournament", TOURNAMENT_TRANSITIONS, current, target, message)
