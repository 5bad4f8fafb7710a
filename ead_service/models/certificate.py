from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Certificate:
    """Proof of course completion.  Append-only: never mutated or deleted."""

    id: UUID
    account_id: UUID
    course_id: UUID
    validation_code: str
    issued_at: datetime

    @staticmethod
    def new(
        *,
        account_id: UUID,
        course_id: UUID,
        validation_code: str,
        now: datetime | None = None,
    ) -> Certificate:
        return Certificate(
            id=uuid4(),
            account_id=account_id,
            course_id=course_id,
            validation_code=validation_code,
            issued_at=now or datetime.now(UTC),
        )


@dataclass(frozen=True, slots=True)
class CertificateSummary:
    """Public view of a certificate.

    Deliberately holds no account id, email or row id.
    """

    holder_name: str
    course_title: str
    issued_at: datetime
    validation_code: str
