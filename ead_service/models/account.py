from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Role(StrEnum):
    STUDENT = "student"
    ADMIN = "admin"


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class Account:
    id: UUID
    email: str
    role: Role = Role.STUDENT
    full_name: str = ""
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.email.split("@", 1)[0]

    @staticmethod
    def new(
        *,
        email: str,
        role: Role = Role.STUDENT,
        full_name: str = "",
        now: datetime | None = None,
    ) -> Account:
        return Account(
            id=uuid4(),
            email=normalize_email(email),
            role=role,
            full_name=full_name,
            created_at=now or datetime.now(UTC),
        )


@dataclass(frozen=True, slots=True)
class Identity:
    """Output of the identity resolver, carried through the request.

    verified mirrors the identity provider's email_verified claim.
    """

    account: Account
    verified: bool = False
