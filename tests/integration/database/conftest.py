# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Each test gets its own SQLite file so migrations run against a real,
initially empty database.
"""

from pathlib import Path

import pytest


@pytest.fixture
def school_db_url(tmp_path: Path) -> str:
    """Get a database URL pointing at an empty SQLite file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'school.db'}"
