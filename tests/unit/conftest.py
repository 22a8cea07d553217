# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for unit tests backed by an in-memory database.

Every test gets a fresh SQLite database with the full schema, a store
bound to one session and a SportsSeeder for inserting rows directly.
Seeder methods return ids only, so tests never hold ORM rows across a
rollback.
"""

from datetime import date, datetime
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.config import SportsSettings
from src.infrastructure.database.models.base import Base
from src.infrastructure.database.store import SportsDataStore

TODAY = date(2025, 2, 1)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create an in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for unit tests."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def store(db_session) -> SportsDataStore:
    """Unit of work over the test session."""
    return SportsDataStore(db_session)


@pytest.fixture
def today() -> date:
    """Fixed calendar date used as the services' clock."""
    return TODAY


@pytest.fixture
def sports_settings() -> SportsSettings:
    """Sports settings with the default thresholds."""
    return SportsSettings()


class SportsSeeder:
    """Inserts rows directly through the store and returns their ids."""

    def __init__(self, store: SportsDataStore) -> None:
        self.store = store

    async def academic_year(self, name: str = "2024-2025", code: str = "2024-2025") -> str:
        async with self.store.transaction():
            year = await self.store.academic_years.create(
                code=code,
                name=name,
                start_date=date(2024, 9, 1),
                end_date=date(2025, 6, 30),
                is_current=True,
            )
            return year.id

    async def sport(
        self,
        name: str = "Football",
        category: str = "team",
        status: str = "active",
        academic_year_id: str | None = None,
    ) -> str:
        async with self.store.transaction():
            sport = await self.store.sports.create(
                name=name,
                category=category,
                status=status,
                academic_year_id=academic_year_id,
            )
            return sport.id

    async def team(
        self,
        sport_id: str,
        name: str = "Team A",
        status: str = "active",
        members: list[str] | None = None,
    ) -> str:
        async with self.store.transaction():
            team = await self.store.teams.create(
                sport_id=sport_id,
                name=name,
                status=status,
                members=list(members or []),
            )
            return team.id

    async def enrollment(
        self,
        sport_id: str,
        student_id: str,
        *,
        team_id: str | None = None,
        status: str = "active",
        attendance_count: int = 0,
        total_sessions: int = 0,
        enrollment_date: date = date(2025, 1, 10),
        updated_at: datetime | None = None,
        remarks: str | None = None,
    ) -> str:
        attrs: dict[str, Any] = {}
        if updated_at is not None:
            attrs["updated_at"] = updated_at
        async with self.store.transaction():
            enrollment = await self.store.enrollments.create(
                sport_id=sport_id,
                student_id=student_id,
                team_id=team_id,
                status=status,
                attendance_count=attendance_count,
                total_sessions=total_sessions,
                enrollment_date=enrollment_date,
                remarks=remarks,
                **attrs,
            )
            return enrollment.id

    async def tournament(
        self,
        sport_id: str,
        *,
        name: str = "Spring Cup",
        status: str = "scheduled",
        start_date: date = date(2025, 3, 1),
        end_date: date = date(2025, 3, 10),
        teams: list[str] | None = None,
        participants: list[str] | None = None,
        schedule: list[dict[str, Any]] | None = None,
        venue: str | None = None,
    ) -> str:
        async with self.store.transaction():
            tournament = await self.store.tournaments.create(
                sport_id=sport_id,
                name=name,
                type="inter_school",
                status=status,
                start_date=start_date,
                end_date=end_date,
                venue=venue,
                teams=list(teams or []),
                participants=list(participants or []),
                schedule=list(schedule or []),
                photos=[],
                videos=[],
            )
            return tournament.id

    async def achievement(
        self,
        sport_id: str,
        student_id: str,
        *,
        title: str = "District Finals",
        type: str = "trophy",
        level: str = "district",
        medal: str | None = None,
        position: str | None = None,
        record_type: str | None = None,
        record_value: str | None = None,
        team_id: str | None = None,
        tournament_id: str | None = None,
        achievement_date: date = date(2025, 1, 20),
    ) -> str:
        async with self.store.transaction():
            achievement = await self.store.achievements.create(
                sport_id=sport_id,
                student_id=student_id,
                title=title,
                type=type,
                level=level,
                medal=medal,
                position=position,
                record_type=record_type,
                record_value=record_value,
                team_id=team_id,
                tournament_id=tournament_id,
                achievement_date=achievement_date,
            )
            return achievement.id


@pytest.fixture
def seed(store) -> SportsSeeder:
    """Row seeder bound to the test store."""
    return SportsSeeder(store)
