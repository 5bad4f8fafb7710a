"""PostgreSQL implementation of AccountRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.core.errors import DuplicateKeyError
from ead_service.db.tables import AccountRow
from ead_service.models.account import Account, Role, normalize_email
from ead_service.repos.account_repo import EMAIL_KEY


class PgAccountRepo:
    """Satisfies the AccountRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: UUID) -> Account | None:
        stmt = select(AccountRow).where(AccountRow.id == account_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_account(row)

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(AccountRow).where(AccountRow.email == normalize_email(email))
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_account(row)

    async def add(self, account: Account) -> None:
        # ON CONFLICT DO NOTHING keeps the transaction usable after a
        # duplicate; a plain INSERT would abort it.
        stmt = (
            pg_insert(AccountRow)
            .values(
                id=account.id,
                email=account.email,
                full_name=account.full_name,
                role=str(account.role),
                created_at=account.created_at,
            )
            .on_conflict_do_nothing(constraint=EMAIL_KEY)
            .returning(AccountRow.id)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is None:
            raise DuplicateKeyError(EMAIL_KEY)


def _row_to_account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        email=row.email,
        role=Role(row.role),
        full_name=row.full_name or "",
        created_at=row.created_at,
    )
