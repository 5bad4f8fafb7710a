from __future__ import annotations

from typing import Protocol
from uuid import UUID

from ead_service.models.audit import AuditEntry


class AuditRepo(Protocol):
    async def append(self, entry: AuditEntry) -> None: ...
    async def list_for_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEntry]: ...


class InMemoryAuditRepo:
    """Append-only list; entries are never updated or removed."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    async def append(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    async def list_for_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEntry]:
        return [
            e
            for e in self._entries
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
