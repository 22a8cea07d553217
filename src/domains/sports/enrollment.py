# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Sports enrollment service.

This module provides the SportsEnrollmentService class for:
- Enrolling students in sports, optionally on a team
- Team assignment, withdrawal and completion
- Per-session attendance tracking, single and bulk
- Enrollment queries and the can_enroll precheck

Every mutation runs in one unit of work. Changes to an enrollment's team
update the team member cache in the same transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable

from sqlalchemy.exc import IntegrityError

from src.core.config import SportsSettings, get_settings
from src.domains.sports.errors import (
    AlreadyEnrolledError,
    EnrollmentNotActiveError,
    EnrollmentNotFoundError,
    InactiveSportError,
    InactiveTeamError,
    SportNotFoundError,
    TeamNotFoundError,
    TeamSportMismatchError,
)
from src.domains.sports.lifecycle import ensure_enrollment_transition
from src.domains.sports.roster import TeamRoster
from src.infrastructure.audit import AuditFailurePolicy, AuditRecorder, AuditTrail
from src.infrastructure.database.models import Sport, SportsEnrollment, Team
from src.infrastructure.database.store import Pagination, SportsDataStore
from src.models.sports import (
    AttendanceMark,
    BulkPolicy,
    EligibilityResult,
    EnrollmentCreate,
    EnrollmentFilters,
    EnrollmentPage,
    EnrollmentResponse,
    EnrollmentStatus,
)
from src.utils.datetime import utc_today
from src.utils.numbers import percentage

logger = logging.getLogger(__name__)

AUDIT_ENTITY = "SportsEnrollment"

_WITHDRAW_REFUSALS = {
    EnrollmentStatus.WITHDRAWN.value: "Enrollment is already withdrawn",
    EnrollmentStatus.COMPLETED.value: "Cannot withdraw a completed enrollment",
}


class SportsEnrollmentService:
    """Service for managing sports enrollments.

    Attributes:
        store: Unit of work for the sports tables.
        roster: Team roster kept in step with enrollments.
        audit: Audit recorder applying the configured failure policy.
        settings: Sports program settings.
    """

    def __init__(
        self,
        store: SportsDataStore,
        audit: AuditTrail | None = None,
        settings: SportsSettings | None = None,
        audit_policy: AuditFailurePolicy | None = None,
        roster: TeamRoster | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize enrollment service.

        Args:
            store: Unit of work for the sports tables.
            audit: Audit trail called after enrollment creates and updates.
            settings: Sports settings; defaults to the application settings.
            audit_policy: Overrides settings.audit_failure_policy.
            roster: Team roster; one is built on the same store if omitted.
            today: Clock used for default enrollment dates.
        """
        self.store = store
        self.settings = settings or get_settings().sports
        self.audit = AuditRecorder(
            audit, audit_policy or AuditFailurePolicy(self.settings.audit_failure_policy)
        )
        self.roster = roster or TeamRoster(store)
        self._today = today

    async def enroll_student(
        self,
        request: EnrollmentCreate,
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> EnrollmentResponse:
        """Enroll a student in a sport.

        Args:
            request: Enrollment request data.
            actor_id: ID of the user performing the enrollment.
            request_context: Request metadata forwarded to the audit trail.

        Returns:
            The new active enrollment.

        Raises:
            SportNotFoundError: If sport not found.
            InactiveSportError: If sport is not active.
            AlreadyEnrolledError: If an active enrollment already exists.
            TeamNotFoundError: If the given team is not found.
            TeamSportMismatchError: If the team belongs to another sport.
            InactiveTeamError: If the team is not active.
        """
        async with self.store.transaction():
            sport = await self._get_sport(request.sport_id)
            if not sport.is_active:
                raise InactiveSportError(f'Sport "{sport.name}" is not active for enrollment')

            existing = await self._find_active(request.sport_id, request.student_id)
            if existing is not None:
                raise AlreadyEnrolledError(
                    f'Student is already enrolled in sport "{sport.name}"'
                )

            if request.team_id:
                await self._get_assignable_team(request.team_id, sport.id)

            try:
                enrollment = await self.store.enrollments.create(
                    sport_id=request.sport_id,
                    student_id=request.student_id,
                    team_id=request.team_id,
                    enrollment_date=request.enrollment_date or self._today(),
                    status=EnrollmentStatus.ACTIVE.value,
                    attendance_count=0,
                    total_sessions=0,
                    remarks=request.remarks,
                )
            except IntegrityError as e:
                raise AlreadyEnrolledError(
                    f'Student is already enrolled in sport "{sport.name}"'
                ) from e

            if request.team_id:
                await self.roster.add_member(request.team_id, request.student_id)

            await self.audit.created(
                AUDIT_ENTITY, enrollment.id, enrollment.to_dict(), actor_id, request_context
            )
            response = self._to_response(enrollment)

        logger.info(
            "Enrolled student: student=%s, sport=%s, team=%s, by=%s",
            response.student_id,
            response.sport_id,
            response.team_id,
            actor_id,
        )
        return response

    async def assign_to_team(
        self,
        enrollment_id: str,
        team_id: str,
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> EnrollmentResponse:
        """Move an active enrollment onto a team.

        The student leaves the previous team's member list and joins the
        new one.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            EnrollmentNotActiveError: If enrollment is not active.
            TeamNotFoundError: If team not found.
            TeamSportMismatchError: If the team belongs to another sport.
            InactiveTeamError: If the team is not active.
        """
        async with self.store.transaction():
            enrollment = await self._get_enrollment(enrollment_id, for_update=True)
            if not enrollment.is_active:
                raise EnrollmentNotActiveError(
                    enrollment.status,
                    f"Cannot assign team to {enrollment.status} enrollment",
                )

            await self._get_assignable_team(team_id, enrollment.sport_id)

            old_snapshot = enrollment.to_dict()
            previous_team_id = enrollment.team_id
            if previous_team_id and previous_team_id != team_id:
                await self.roster.remove_member(previous_team_id, enrollment.student_id)

            enrollment = await self.store.enrollments.update(enrollment_id, team_id=team_id)
            await self.roster.add_member(team_id, enrollment.student_id)

            await self.audit.updated(
                AUDIT_ENTITY,
                enrollment_id,
                old_snapshot,
                enrollment.to_dict(),
                actor_id,
                request_context,
            )
            response = self._to_response(enrollment)

        logger.info(
            "Assigned enrollment to team: enrollment=%s, from=%s, to=%s",
            enrollment_id,
            previous_team_id,
            team_id,
        )
        return response

    async def withdraw_student(
        self,
        enrollment_id: str,
        remarks: str | None = None,
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> EnrollmentResponse:
        """Withdraw a student from a sport.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            InvalidStateTransitionError: If already withdrawn or completed.
        """
        async with self.store.transaction():
            enrollment = await self._get_enrollment(enrollment_id, for_update=True)
            ensure_enrollment_transition(
                enrollment.status,
                EnrollmentStatus.WITHDRAWN,
                _WITHDRAW_REFUSALS.get(enrollment.status),
            )

            old_snapshot = enrollment.to_dict()
            if enrollment.team_id:
                await self.roster.remove_member(enrollment.team_id, enrollment.student_id)

            changes: dict[str, Any] = {"status": EnrollmentStatus.WITHDRAWN.value}
            if remarks is not None:
                changes["remarks"] = remarks
            enrollment = await self.store.enrollments.update(enrollment_id, **changes)

            await self.audit.updated(
                AUDIT_ENTITY,
                enrollment_id,
                old_snapshot,
                enrollment.to_dict(),
                actor_id,
                request_context,
            )
            response = self._to_response(enrollment)

        logger.info("Withdrew student: enrollment=%s, by=%s", enrollment_id, actor_id)
        return response

    async def complete_enrollment(
        self,
        enrollment_id: str,
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> EnrollmentResponse:
        """Mark an active enrollment as completed.

        A completed enrollment no longer counts towards team membership,
        so the student leaves the team's member list.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            InvalidStateTransitionError: If the enrollment is not active.
        """
        async with self.store.transaction():
            enrollment = await self._get_enrollment(enrollment_id, for_update=True)
            ensure_enrollment_transition(
                enrollment.status,
                EnrollmentStatus.COMPLETED,
                f"Cannot complete enrollment with status: {enrollment.status}",
            )

            old_snapshot = enrollment.to_dict()
            if enrollment.team_id:
                await self.roster.remove_member(enrollment.team_id, enrollment.student_id)

            enrollment = await self.store.enrollments.update(
                enrollment_id, status=EnrollmentStatus.COMPLETED.value
            )

            await self.audit.updated(
                AUDIT_ENTITY,
                enrollment_id,
                old_snapshot,
                enrollment.to_dict(),
                actor_id,
                request_context,
            )
            response = self._to_response(enrollment)

        logger.info("Completed enrollment: enrollment=%s, by=%s", enrollment_id, actor_id)
        return response

    async def mark_attendance(self, enrollment_id: str, present: bool) -> EnrollmentResponse:
        """Record one session for an active enrollment.

        total_sessions always increments; attendance_count only when present.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            EnrollmentNotActiveError: If enrollment is not active.
        """
        async with self.store.transaction():
            enrollment = await self._get_enrollment(enrollment_id, for_update=True)
            if not enrollment.is_active:
                raise EnrollmentNotActiveError(
                    enrollment.status,
                    f"Cannot mark attendance for {enrollment.status} enrollment",
                )

            enrollment = await self.store.enrollments.update(
                enrollment_id,
                total_sessions=enrollment.total_sessions + 1,
                attendance_count=enrollment.attendance_count + (1 if present else 0),
            )
            response = self._to_response(enrollment)

        logger.debug(
            "Marked attendance: enrollment=%s, present=%s, sessions=%d",
            enrollment_id,
            present,
            response.total_sessions,
        )
        return response

    async def bulk_mark_attendance(
        self,
        items: Iterable[AttendanceMark | dict[str, Any]],
        policy: BulkPolicy = BulkPolicy.PARTIAL,
    ) -> list[EnrollmentResponse]:
        """Mark attendance for many enrollments in order.

        Args:
            items: Attendance marks.
            policy: PARTIAL validates each item on its own, logs and skips
                failing items and returns the successes. FAIL_FAST applies
                all items in one transaction and re-raises the first
                failure, leaving nothing applied.

        Returns:
            Enrollments that were updated.
        """
        items = list(items)
        updated: list[EnrollmentResponse] = []

        if BulkPolicy(policy) is BulkPolicy.FAIL_FAST:
            marks = [AttendanceMark.model_validate(item) for item in items]
            async with self.store.transaction():
                for mark in marks:
                    updated.append(await self.mark_attendance(mark.enrollment_id, mark.present))
            return updated

        for index, item in enumerate(items):
            try:
                mark = AttendanceMark.model_validate(item)
                updated.append(await self.mark_attendance(mark.enrollment_id, mark.present))
            except Exception as e:
                logger.warning("Skipped attendance mark: item=%d, error=%s", index, e)

        logger.info("Bulk attendance: marked=%d, skipped=%d", len(updated), len(items) - len(updated))
        return updated

    @staticmethod
    def get_attendance_percentage(enrollment: SportsEnrollment | EnrollmentResponse) -> int:
        """Attendance as a whole percentage, 0 when no sessions were recorded."""
        return percentage(enrollment.attendance_count, enrollment.total_sessions)

    async def can_enroll(
        self,
        sport_id: str,
        student_id: str,
        team_id: str | None = None,
    ) -> EligibilityResult:
        """Read-only precheck mirroring enroll_student's validations."""
        sport = await self.store.sports.find_by_id(sport_id)
        if sport is None:
            return EligibilityResult(eligible=False, message="Sport not found")
        if not sport.is_active:
            return EligibilityResult(eligible=False, message="Sport is not active")
        if await self._find_active(sport_id, student_id) is not None:
            return EligibilityResult(eligible=False, message="Student is already enrolled")

        if team_id:
            team = await self.store.teams.find_by_id(team_id)
            if team is None:
                return EligibilityResult(eligible=False, message="Team not found")
            if team.sport_id != sport_id:
                return EligibilityResult(
                    eligible=False, message="Team does not belong to this sport"
                )
            if not team.is_active:
                return EligibilityResult(eligible=False, message="Team is not active")

        return EligibilityResult(eligible=True)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentResponse:
        enrollment = await self._get_enrollment(enrollment_id)
        return self._to_response(enrollment)

    async def get_student_enrollments(
        self,
        student_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[EnrollmentResponse]:
        """All enrollments of a student, newest first."""
        filters: dict[str, Any] = {"student_id": student_id}
        if status is not None:
            filters["status"] = EnrollmentStatus(status).value
        enrollments = await self.store.enrollments.find_all(
            order_by=[SportsEnrollment.enrollment_date.desc(), SportsEnrollment.created_at.desc()],
            **filters,
        )
        return [self._to_response(e) for e in enrollments]

    async def get_sport_enrollments(
        self,
        sport_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[EnrollmentResponse]:
        """All enrollments in a sport, oldest first."""
        filters: dict[str, Any] = {"sport_id": sport_id}
        if status is not None:
            filters["status"] = EnrollmentStatus(status).value
        enrollments = await self.store.enrollments.find_all(
            order_by=[SportsEnrollment.enrollment_date, SportsEnrollment.created_at],
            **filters,
        )
        return [self._to_response(e) for e in enrollments]

    async def get_team_enrollments(
        self,
        team_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[EnrollmentResponse]:
        """All enrollments assigned to a team, oldest first."""
        filters: dict[str, Any] = {"team_id": team_id}
        if status is not None:
            filters["status"] = EnrollmentStatus(status).value
        enrollments = await self.store.enrollments.find_all(
            order_by=[SportsEnrollment.enrollment_date, SportsEnrollment.created_at],
            **filters,
        )
        return [self._to_response(e) for e in enrollments]

    async def list_enrollments(
        self,
        filters: EnrollmentFilters | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> EnrollmentPage:
        """List enrollments with filters and offset pagination.

        Args:
            filters: Optional equality and date-range filters.
            page: 1-based page number.
            limit: Page size, clamped to the configured maximum.

        Returns:
            One page of enrollments, newest first, with pagination metadata.
        """
        filters = filters or EnrollmentFilters()
        pagination = Pagination.from_params(
            page,
            limit,
            default_limit=self.settings.default_page_limit,
            max_limit=self.settings.max_page_limit,
        )

        criteria = []
        if filters.enrollment_date_from is not None:
            criteria.append(SportsEnrollment.enrollment_date >= filters.enrollment_date_from)
        if filters.enrollment_date_to is not None:
            criteria.append(SportsEnrollment.enrollment_date <= filters.enrollment_date_to)

        equality = filters.model_dump(
            include={"sport_id", "student_id", "team_id", "status"},
            exclude_none=True,
            mode="json",
        )
        rows, meta = await self.store.enrollments.paginate(
            pagination,
            *criteria,
            order_by=[SportsEnrollment.enrollment_date.desc(), SportsEnrollment.created_at.desc()],
            **equality,
        )
        return EnrollmentPage(items=[self._to_response(e) for e in rows], pagination=meta)

    async def update_remarks(
        self,
        enrollment_id: str,
        remarks: str | None,
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> EnrollmentResponse:
        """Replace an enrollment's remarks.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        async with self.store.transaction():
            enrollment = await self._get_enrollment(enrollment_id, for_update=True)
            old_snapshot = enrollment.to_dict()
            enrollment = await self.store.enrollments.update(enrollment_id, remarks=remarks)
            await self.audit.updated(
                AUDIT_ENTITY,
                enrollment_id,
                old_snapshot,
                enrollment.to_dict(),
                actor_id,
                request_context,
            )
            return self._to_response(enrollment)

    async def _get_sport(self, sport_id: str) -> Sport:
        sport = await self.store.sports.find_by_id(sport_id)
        if sport is None:
            raise SportNotFoundError(f"Sport with ID {sport_id} not found")
        return sport

    async def _get_enrollment(self, enrollment_id: str, for_update: bool = False) -> SportsEnrollment:
        enrollment = await self.store.enrollments.find_by_id(enrollment_id, for_update=for_update)
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment with ID {enrollment_id} not found")
        return enrollment

    async def _find_active(self, sport_id: str, student_id: str) -> SportsEnrollment | None:
        return await self.store.enrollments.find_one(
            sport_id=sport_id,
            student_id=student_id,
            status=EnrollmentStatus.ACTIVE.value,
        )

    async def _get_assignable_team(self, team_id: str, sport_id: str) -> Team:
        team = await self.store.teams.find_by_id(team_id)
        if team is None:
            raise TeamNotFoundError(f"Team with ID {team_id} not found")
        if team.sport_id != sport_id:
            raise TeamSportMismatchError(f'Team "{team.name}" does not belong to this sport')
        if not team.is_active:
            raise InactiveTeamError(f'Team "{team.name}" is not active')
        return team

    @staticmethod
    def _to_response(enrollment: SportsEnrollment) -> EnrollmentResponse:
        return EnrollmentResponse.model_validate(enrollment)
