# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit trail collaborator for enrollment mutations.

Audit storage lives outside the sports program. Services receive an
AuditTrail implementation and call it after the primary write has been
flushed, inside the same unit of work. What happens when the trail itself
fails is decided by AuditFailurePolicy:

- IGNORE: log a warning and keep the mutation
- PROPAGATE: re-raise, which rolls the mutation back
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from src.utils.logging import get_logger

logger = logging.getLogger(__name__)


class AuditFailurePolicy(str, Enum):
    """What a service does when the audit trail raises."""

    IGNORE = "ignore"
    PROPAGATE = "propagate"


class AuditTrail(ABC):
    """Abstract audit trail.

    Implementations persist or forward audit entries. Snapshots are
    JSON-friendly dicts produced by Base.to_dict().
    """

    @abstractmethod
    async def log_create(
        self,
        entity_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        """Record creation of an entity."""
        ...

    @abstractmethod
    async def log_update(
        self,
        entity_name: str,
        entity_id: str,
        old_snapshot: dict[str, Any],
        new_snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        """Record an update of an entity."""
        ...


class LoggingAuditTrail(AuditTrail):
    """Audit trail that emits structured log events.

    Only changed fields are logged for updates.
    """

    def __init__(self) -> None:
        self._log = get_logger("audit")

    async def log_create(
        self,
        entity_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        self._log.info(
            "audit.create",
            entity=entity_name,
            entity_id=entity_id,
            actor_id=actor_id,
            snapshot=snapshot,
            context=request_context or {},
        )

    async def log_update(
        self,
        entity_name: str,
        entity_id: str,
        old_snapshot: dict[str, Any],
        new_snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        changes = {
            key: {"old": old_snapshot.get(key), "new": value}
            for key, value in new_snapshot.items()
            if old_snapshot.get(key) != value and key != "updated_at"
        }
        self._log.info(
            "audit.update",
            entity=entity_name,
            entity_id=entity_id,
            actor_id=actor_id,
            changes=changes,
            context=request_context or {},
        )


class AuditRecorder:
    """Calls an AuditTrail and applies the failure policy.

    Attributes:
        trail: Wrapped audit trail, or None to skip auditing.
        policy: Failure policy.
    """

    def __init__(
        self,
        trail: AuditTrail | None,
        policy: AuditFailurePolicy = AuditFailurePolicy.IGNORE,
    ) -> None:
        self.trail = trail
        self.policy = AuditFailurePolicy(policy)

    async def created(
        self,
        entity_name: str,
        entity_id: str,
        snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        if self.trail is None:
            return
        try:
            await self.trail.log_create(
                entity_name, entity_id, snapshot, actor_id, request_context
            )
        except Exception as e:
            self._handle_failure("create", entity_name, entity_id, e)

    async def updated(
        self,
        entity_name: str,
        entity_id: str,
        old_snapshot: dict[str, Any],
        new_snapshot: dict[str, Any],
        actor_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> None:
        if self.trail is None:
            return
        try:
            await self.trail.log_update(
                entity_name, entity_id, old_snapshot, new_snapshot, actor_id, request_context
            )
        except Exception as e:
            self._handle_failure("update", entity_name, entity_id, e)

    def _handle_failure(
        self, action: str, entity_name: str, entity_id: str, error: Exception
    ) -> None:
        if self.policy is AuditFailurePolicy.PROPAGATE:
            logger.error(
                "Audit %s failed for %s %s: %s", action, entity_name, entity_id, error
            )
            raise error
        logger.warning(
            "Audit %s failed for %s %s, keeping mutation: %s",
            action,
            entity_name,
            entity_id,
            error,
        )
