"""PostgreSQL implementation of EnrollmentRepo.

Both writes are single statements keyed on the natural unique key, so two
admins granting the same (account, course) at once cannot produce two rows,
and a revoke can never flip a row that is not currently active.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.db.tables import ENROLLMENT_KEY, EnrollmentRow
from ead_service.models.enrollment import Enrollment, EnrollmentStatus


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, enrollment_id: UUID) -> Enrollment | None:
        row = await self._session.get(EnrollmentRow, enrollment_id)
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def get_for(self, account_id: UUID, course_id: UUID) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.account_id == account_id,
            EnrollmentRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def list_for_account(self, account_id: UUID) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.account_id == account_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def count_by_course(self) -> dict[UUID, int]:
        stmt = select(EnrollmentRow.course_id, func.count()).group_by(
            EnrollmentRow.course_id
        )
        return {course_id: count for course_id, count in await self._session.execute(stmt)}

    async def upsert_active(
        self,
        account_id: UUID,
        course_id: UUID,
        access_end_at: datetime | None,
        now: datetime,
    ) -> Enrollment:
        insert_stmt = pg_insert(EnrollmentRow).values(
            id=uuid4(),
            account_id=account_id,
            course_id=course_id,
            status=str(EnrollmentStatus.ACTIVE),
            access_end_at=access_end_at,
            created_at=now,
            updated_at=now,
        )
        stmt = (
            insert_stmt.on_conflict_do_update(
                constraint=ENROLLMENT_KEY,
                set_={
                    "status": str(EnrollmentStatus.ACTIVE),
                    "access_end_at": insert_stmt.excluded.access_end_at,
                    "updated_at": insert_stmt.excluded.updated_at,
                },
            )
            .returning(EnrollmentRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_enrollment(row)

    async def revoke_if_active(
        self, enrollment_id: UUID, now: datetime
    ) -> Enrollment | None:
        stmt = (
            update(EnrollmentRow)
            .where(
                EnrollmentRow.id == enrollment_id,
                EnrollmentRow.status == str(EnrollmentStatus.ACTIVE),
            )
            .values(status=str(EnrollmentStatus.REVOKED), updated_at=now)
            .returning(EnrollmentRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        account_id=row.account_id,
        course_id=row.course_id,
        status=EnrollmentStatus(row.status),
        access_end_at=row.access_end_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
