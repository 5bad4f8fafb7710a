from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4


class AuditAction(StrEnum):
    GRANT_ACCESS = "GRANT_ACCESS"
    REVOKE_ACCESS = "REVOKE_ACCESS"
    ISSUE_CERTIFICATE = "ISSUE_CERTIFICATE"
    CREATE_COURSE = "CREATE_COURSE"


@dataclass(frozen=True, slots=True)
class AuditEntry:
    id: UUID
    actor_id: UUID
    action: AuditAction
    entity_type: str  # enrollments|certificates|courses
    entity_id: UUID
    details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @staticmethod
    def new(
        *,
        actor_id: UUID,
        action: AuditAction,
        entity_type: str,
        entity_id: UUID,
        details: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> AuditEntry:
        return AuditEntry(
            id=uuid4(),
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=dict(details or {}),
            created_at=now or datetime.now(UTC),
        )
