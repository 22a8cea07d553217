# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the school sports core.

This package contains domain services that encapsulate business logic.
Each domain module provides services that orchestrate operations
across the entity store and injected collaborators.

Domains:
    sports: Enrollments, team rosters, tournaments, match results,
        statistics and certificate data.
"""
