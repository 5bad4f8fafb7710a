from __future__ import annotations

from typing import Protocol
from uuid import UUID

from ead_service.core.errors import DuplicateKeyError
from ead_service.models.account import Account, normalize_email

EMAIL_KEY = "uq_accounts_email"


class AccountRepo(Protocol):
    async def get_by_id(self, account_id: UUID) -> Account | None: ...
    async def get_by_email(self, email: str) -> Account | None: ...
    async def add(self, account: Account) -> None: ...


class InMemoryAccountRepo:
    def __init__(self) -> None:
        self._by_email: dict[str, Account] = {}
        self._by_id: dict[UUID, Account] = {}

    async def get_by_id(self, account_id: UUID) -> Account | None:
        return self._by_id.get(account_id)

    async def get_by_email(self, email: str) -> Account | None:
        return self._by_email.get(normalize_email(email))

    async def add(self, account: Account) -> None:
        if account.email in self._by_email:
            raise DuplicateKeyError(EMAIL_KEY)
        self._by_email[account.email] = account
        self._by_id[account.id] = account
