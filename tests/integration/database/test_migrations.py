# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for database migrations.

Tests migration execution against a SQLite database file.
"""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine

from src.infrastructure.database.migrations.runner import (
    SPORTS_MIGRATIONS,
    check_migrations_pending,
    get_migration_status,
    run_migrations,
)

pytestmark = pytest.mark.integration

EXPECTED_TABLES = {
    "academic_years",
    "sports",
    "teams",
    "sports_enrollments",
    "tournaments",
    "sports_achievements",
}


async def _inspect(db_url: str, fn):
    engine = create_async_engine(db_url)
    try:
        async with engine.connect() as conn:
            return await conn.run_sync(lambda sync_conn: fn(inspect(sync_conn)))
    finally:
        await engine.dispose()


class TestRunMigrations:
    """Test applying the sports schema."""

    @pytest.mark.asyncio
    async def test_fresh_database_applies_all(self, school_db_url):
        applied = await run_migrations(school_db_url)

        assert applied == SPORTS_MIGRATIONS

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, school_db_url):
        await run_migrations(school_db_url)

        assert await run_migrations(school_db_url) == []

    @pytest.mark.asyncio
    async def test_migration_creates_tables(self, school_db_url):
        """Verify the migration creates all required tables."""
        await run_migrations(school_db_url)

        tables = set(await _inspect(school_db_url, lambda i: i.get_table_names()))

        assert EXPECTED_TABLES <= tables
        assert "alembic_version" in tables

    @pytest.mark.asyncio
    async def test_enrollments_table_has_correct_columns(self, school_db_url):
        await run_migrations(school_db_url)

        columns = await _inspect(
            school_db_url,
            lambda i: {col["name"] for col in i.get_columns("sports_enrollments")},
        )

        assert {
            "id",
            "sport_id",
            "student_id",
            "team_id",
            "enrollment_date",
            "status",
            "attendance_count",
            "total_sessions",
            "remarks",
            "created_at",
            "updated_at",
        } <= columns

    @pytest.mark.asyncio
    async def test_active_enrollment_index_enforced(self, school_db_url):
        """Verify a second active enrollment for the same sport is refused."""
        await run_migrations(school_db_url)
        insert = text(
            "INSERT INTO sports_enrollments "
            "(id, sport_id, student_id, enrollment_date, status, attendance_count, total_sessions) "
            "VALUES (:id, 'sp1', 's1', '2025-01-10', :status, 0, 0)"
        )

        engine = create_async_engine(school_db_url)
        try:
            async with engine.begin() as conn:
                await conn.execute(insert, {"id": "e1", "status": "withdrawn"})
                await conn.execute(insert, {"id": "e2", "status": "active"})

            with pytest.raises(IntegrityError):
                async with engine.begin() as conn:
                    await conn.execute(insert, {"id": "e3", "status": "active"})
        finally:
            await engine.dispose()


class TestMigrationStatus:
    """Test status reporting."""

    @pytest.mark.asyncio
    async def test_pending_before_upgrade(self, school_db_url):
        status = await get_migration_status(school_db_url)

        assert await check_migrations_pending(school_db_url) is True
        assert status["current_version"] is None
        assert status["pending_migrations"] == SPORTS_MIGRATIONS
        assert status["is_up_to_date"] is False

    @pytest.mark.asyncio
    async def test_up_to_date_after_upgrade(self, school_db_url):
        await run_migrations(school_db_url)

        status = await get_migration_status(school_db_url)

        assert await check_migrations_pending(school_db_url) is False
        assert status["current_version"] == SPORTS_MIGRATIONS[-1]
        assert status["latest_version"] == SPORTS_MIGRATIONS[-1]
        assert status["pending_count"] == 0

    @pytest.mark.asyncio
    async def test_unknown_target_applies_nothing(self, school_db_url):
        assert await run_migrations(school_db_url, target_revision="999_missing") == []
