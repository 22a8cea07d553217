# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic schemas for requests and responses.

- common: Pagination metadata shared by list endpoints
- sports: Sports program enums, requests and responses
"""
