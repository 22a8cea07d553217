# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external integrations.

This package contains:
- database: Connections, ORM models, entity store and migrations
- audit: Audit trail collaborator and failure policy
"""
