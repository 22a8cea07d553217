# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Team roster management.

Team membership is defined by active enrollments pointing at a team.
Team.members is a cache of that set; the enrollment service updates it
inside the same unit of work as every enrollment change touching team_id.
derive_members() reads the authority and sync_members() repairs the cache.
"""

import logging

from src.domains.sports.errors import SportNotFoundError, TeamNotFoundError
from src.infrastructure.database.models import SportsEnrollment, Team
from src.infrastructure.database.store import SportsDataStore
from src.models.sports import ActivityStatus, EnrollmentStatus, TeamCreate, TeamResponse

logger = logging.getLogger(__name__)


class TeamRoster:
    """Keeps team member lists in step with enrollments.

    Attributes:
        store: Unit of work for the sports tables.
    """

    def __init__(self, store: SportsDataStore) -> None:
        self.store = store

    async def create_team(self, request: TeamCreate) -> TeamResponse:
        """Create an active team with no members.

        Args:
            request: Team creation data.

        Returns:
            The created team.

        Raises:
            SportNotFoundError: If the sport does not exist.
        """
        async with self.store.transaction():
            sport = await self.store.sports.find_by_id(request.sport_id)
            if sport is None:
                raise SportNotFoundError(f"Sport {request.sport_id} not found")

            team = await self.store.teams.create(
                **request.model_dump(),
                members=[],
                status=ActivityStatus.ACTIVE.value,
            )
            response = TeamResponse.model_validate(team)

        logger.info("Created team: id=%s, sport=%s", response.id, response.sport_id)
        return response

    async def get_team(self, team_id: str) -> TeamResponse:
        team = await self._get_team(team_id)
        return TeamResponse.model_validate(team)

    async def add_member(self, team_id: str, student_id: str) -> list[str]:
        """Add a student to a team's member cache.

        Adding an existing member is a no-op.

        Args:
            team_id: Team identifier.
            student_id: Student identifier.

        Returns:
            The team's member list after the change.

        Raises:
            TeamNotFoundError: If the team does not exist.
        """
        async with self.store.transaction():
            team = await self._get_team(team_id, for_update=True)
            members = list(team.members or [])
            if student_id not in members:
                members.append(student_id)
                await self.store.teams.update(team_id, members=members)
                logger.debug("Added member: team=%s, student=%s", team_id, student_id)
            return members

    async def remove_member(self, team_id: str, student_id: str) -> list[str] | None:
        """Remove a student from a team's member cache.

        A missing team is logged and ignored.

        Returns:
            The team's member list after the change, or None if the team
            does not exist.
        """
        async with self.store.transaction():
            team = await self.store.teams.find_by_id(team_id, for_update=True)
            if team is None:
                logger.warning(
                    "Cannot remove member from missing team: team=%s, student=%s",
                    team_id,
                    student_id,
                )
                return None

            members = list(team.members or [])
            if student_id in members:
                members.remove(student_id)
                await self.store.teams.update(team_id, members=members)
                logger.debug("Removed member: team=%s, student=%s", team_id, student_id)
            return members

    async def derive_members(self, team_id: str) -> list[str]:
        """Student ids of active enrollments assigned to the team.

        Raises:
            TeamNotFoundError: If the team does not exist.
        """
        await self._get_team(team_id)
        enrollments = await self.store.enrollments.find_all(
            order_by=SportsEnrollment.created_at,
            team_id=team_id,
            status=EnrollmentStatus.ACTIVE.value,
        )
        return [enrollment.student_id for enrollment in enrollments]

    async def sync_members(self, team_id: str) -> TeamResponse:
        """Rewrite a team's member cache from its active enrollments."""
        async with self.store.transaction():
            team = await self._get_team(team_id, for_update=True)
            derived = await self.derive_members(team_id)
            if set(derived) != set(team.members or []):
                logger.warning(
                    "Team member cache out of sync, rewriting: team=%s, cached=%d, derived=%d",
                    team_id,
                    len(team.members or []),
                    len(derived),
                )
            team = await self.store.teams.update(team_id, members=derived)
            return TeamResponse.model_validate(team)

    async def is_consistent(self, team_id: str) -> bool:
        """Check whether the member cache matches the active enrollments."""
        team = await self._get_team(team_id)
        cached = set(team.members or [])
        return cached == set(await self.derive_members(team_id))

    async def _get_team(self, team_id: str, for_update: bool = False) -> Team:
        team = await self.store.teams.find_by_id(team_id, for_update=for_update)
        if team is None:
            raise TeamNotFoundError(f"Team {team_id} not found")
        return team
