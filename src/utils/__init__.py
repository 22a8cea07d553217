# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for the school sports core.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime and duration helpers
- numbers: Half-up rounding, percentages and means
"""

from src.utils.datetime import (
    as_utc_datetime,
    ensure_utc,
    format_iso,
    months_between,
    months_to_human,
    now,
    to_date,
    utc_now,
    utc_today,
)
from src.utils.logging import bind_context, clear_context, get_logger, setup_logging
from src.utils.numbers import mean, percentage, round_half_up

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "utc_today",
    "now",
    "ensure_utc",
    "as_utc_datetime",
    "to_date",
    "format_iso",
    "months_between",
    "months_to_human",
    # Numbers
    "round_half_up",
    "percentage",
    "mean",
]
