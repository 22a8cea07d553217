# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the school database.

This package provides:
- connection: Async engine and session lifecycle
- models: SQLAlchemy ORM models for the sports tables
- store: Per-entity repositories and the SportsDataStore unit of work
- migrations: Programmatic schema migrations

Example:
    from src.infrastructure.database import get_session, init_database
    from src.infrastructure.database.store import SportsDataStore

    await init_database(settings)
    async with get_session() as session:
        store = SportsDataStore(session)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    build_engine,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "DatabaseError",
    "build_engine",
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
