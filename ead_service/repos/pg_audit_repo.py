"""PostgreSQL implementation of AuditRepo (insert and read only)."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.db.tables import AuditLogRow
from ead_service.models.audit import AuditAction, AuditEntry


class PgAuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, entry: AuditEntry) -> None:
        await self._session.execute(
            insert(AuditLogRow).values(
                id=entry.id,
                actor_id=entry.actor_id,
                action=str(entry.action),
                entity_table=entry.entity_type,
                entity_id=entry.entity_id,
                details=entry.details,
                created_at=entry.created_at,
            )
        )

    async def list_for_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEntry]:
        stmt = (
            select(AuditLogRow)
            .where(
                AuditLogRow.entity_table == entity_type,
                AuditLogRow.entity_id == entity_id,
            )
            .order_by(AuditLogRow.created_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            AuditEntry(
                id=r.id,
                actor_id=r.actor_id,
                action=AuditAction(r.action),
                entity_type=r.entity_table,
                entity_id=r.entity_id,
                details=dict(r.details or {}),
                created_at=r.created_at,
            )
            for r in rows
        ]
