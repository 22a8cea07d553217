# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the school sports core.

This package contains shared foundations:
- config: Application configuration and settings
"""
