from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4


class EnrollmentStatus(StrEnum):
    ACTIVE = "active"
    REVOKED = "revoked"


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One account's access grant to one course.

    At most one row per (account_id, course_id).  Rows are never deleted;
    revocation flips status and a later grant re-activates the same row.
    """

    id: UUID
    account_id: UUID
    course_id: UUID
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    access_end_at: datetime | None = None  # None = unlimited
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        account_id: UUID,
        course_id: UUID,
        access_end_at: datetime | None = None,
        now: datetime | None = None,
    ) -> Enrollment:
        now = now or datetime.now(UTC)
        return Enrollment(
            id=uuid4(),
            account_id=account_id,
            course_id=course_id,
            status=EnrollmentStatus.ACTIVE,
            access_end_at=access_end_at,
            created_at=now,
            updated_at=now,
        )


# Upper bound for a timed grant; larger values overflow datetime.
MAX_DAYS_VALID = 36500


def compute_access_end(now: datetime, days_valid: int | None) -> datetime | None:
    """Absolute expiry for a grant; None or a non-positive value means unlimited."""
    if days_valid is None or days_valid <= 0:
        return None
    return now + timedelta(days=days_valid)


def is_effectively_active(enrollment: Enrollment, now: datetime) -> bool:
    """Whether the account can use the course right now.

    Every consumer (course listing, course detail, progress reporting,
    certificate eligibility) goes through this predicate.
    """
    if enrollment.status != EnrollmentStatus.ACTIVE:
        return False
    return enrollment.access_end_at is None or enrollment.access_end_at > now
