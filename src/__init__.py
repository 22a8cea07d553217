"""School Sports Core.

Sports-program domain logic for a school back office: enrollments, team
rosters, tournaments, match results, statistics and certificate data.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
