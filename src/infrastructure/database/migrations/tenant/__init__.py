# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School database migrations.

Contains migrations for:
- Academic years
- Sports, teams and enrollments
- Tournaments with their match schedules
- Sports achievements
"""
