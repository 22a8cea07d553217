# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common schemas shared across domains."""

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    """Offset pagination metadata returned with list results."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)
