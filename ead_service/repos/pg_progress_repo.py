"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.db.tables import ProgressRow
from ead_service.models.progress import ProgressMark


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, mark: ProgressMark) -> None:
        insert_stmt = pg_insert(ProgressRow).values(
            account_id=mark.account_id,
            lesson_id=mark.lesson_id,
            is_completed=mark.is_completed,
            completed_at=mark.completed_at,
            last_watched_at=mark.last_watched_at,
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=[ProgressRow.account_id, ProgressRow.lesson_id],
            set_={
                "is_completed": insert_stmt.excluded.is_completed,
                "completed_at": insert_stmt.excluded.completed_at,
                "last_watched_at": insert_stmt.excluded.last_watched_at,
            },
        )
        await self._session.execute(stmt)

    async def get(self, account_id: UUID, lesson_id: UUID) -> ProgressMark | None:
        row = await self._session.get(ProgressRow, (account_id, lesson_id))
        if row is None:
            return None
        return ProgressMark(
            account_id=row.account_id,
            lesson_id=row.lesson_id,
            is_completed=row.is_completed,
            completed_at=row.completed_at,
            last_watched_at=row.last_watched_at,
        )

    async def count_completed(
        self, account_id: UUID, lesson_ids: Iterable[UUID]
    ) -> int:
        ids = list(set(lesson_ids))
        if not ids:
            return 0
        stmt = select(func.count()).where(
            ProgressRow.account_id == account_id,
            ProgressRow.is_completed.is_(True),
            ProgressRow.lesson_id.in_(ids),
        )
        return (await self._session.execute(stmt)).scalar_one()
