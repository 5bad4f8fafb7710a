"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.core.errors import DuplicateKeyError
from ead_service.db.tables import CertificateRow
from ead_service.models.certificate import Certificate
from ead_service.repos.certificate_repo import ACCOUNT_COURSE_KEY, VALIDATION_CODE_KEY


class PgCertificateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for(self, account_id: UUID, course_id: UUID) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.account_id == account_id,
            CertificateRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def get_by_code(self, validation_code: str) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.validation_code == validation_code
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def add(self, certificate: Certificate) -> None:
        # Either unique constraint may fire.  DO NOTHING leaves the
        # transaction usable; which key collided is decided by re-reading.
        stmt = (
            pg_insert(CertificateRow)
            .values(
                id=certificate.id,
                account_id=certificate.account_id,
                course_id=certificate.course_id,
                validation_code=certificate.validation_code,
                issued_at=certificate.issued_at,
            )
            .on_conflict_do_nothing()
            .returning(CertificateRow.id)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            return
        if await self.get_for(certificate.account_id, certificate.course_id) is not None:
            raise DuplicateKeyError(ACCOUNT_COURSE_KEY)
        raise DuplicateKeyError(VALIDATION_CODE_KEY)


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        account_id=row.account_id,
        course_id=row.course_id,
        validation_code=row.validation_code,
        issued_at=row.issued_at,
    )
