from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol
from uuid import UUID

from ead_service.models.enrollment import Enrollment, EnrollmentStatus


class EnrollmentRepo(Protocol):
    async def get(self, enrollment_id: UUID) -> Enrollment | None: ...
    async def get_for(self, account_id: UUID, course_id: UUID) -> Enrollment | None: ...
    async def list_for_account(self, account_id: UUID) -> list[Enrollment]: ...
    async def count_by_course(self) -> dict[UUID, int]: ...

    async def upsert_active(
        self,
        account_id: UUID,
        course_id: UUID,
        access_end_at: datetime | None,
        now: datetime,
    ) -> Enrollment:
        """Create or re-activate the (account, course) row in one write."""
        ...

    async def revoke_if_active(
        self, enrollment_id: UUID, now: datetime
    ) -> Enrollment | None:
        """Flip active -> revoked.  Returns None when no row transitioned."""
        ...


class InMemoryEnrollmentRepo:
    """Dict-backed ledger storage.

    Each method body runs without awaiting, so on a single event loop every
    call is atomic, which is what gives upsert/revoke their
    compare-and-set behaviour here.
    """

    def __init__(self) -> None:
        self._by_id: dict[UUID, Enrollment] = {}
        self._by_key: dict[tuple[UUID, UUID], UUID] = {}

    async def get(self, enrollment_id: UUID) -> Enrollment | None:
        return self._by_id.get(enrollment_id)

    async def get_for(self, account_id: UUID, course_id: UUID) -> Enrollment | None:
        enrollment_id = self._by_key.get((account_id, course_id))
        if enrollment_id is None:
            return None
        return self._by_id[enrollment_id]

    async def list_for_account(self, account_id: UUID) -> list[Enrollment]:
        return [e for e in self._by_id.values() if e.account_id == account_id]

    async def count_by_course(self) -> dict[UUID, int]:
        counts: dict[UUID, int] = {}
        for e in self._by_id.values():
            counts[e.course_id] = counts.get(e.course_id, 0) + 1
        return counts

    async def upsert_active(
        self,
        account_id: UUID,
        course_id: UUID,
        access_end_at: datetime | None,
        now: datetime,
    ) -> Enrollment:
        existing_id = self._by_key.get((account_id, course_id))
        if existing_id is None:
            enrollment = Enrollment.new(
                account_id=account_id,
                course_id=course_id,
                access_end_at=access_end_at,
                now=now,
            )
            self._by_key[(account_id, course_id)] = enrollment.id
        else:
            enrollment = replace(
                self._by_id[existing_id],
                status=EnrollmentStatus.ACTIVE,
                access_end_at=access_end_at,
                updated_at=now,
            )
        self._by_id[enrollment.id] = enrollment
        return enrollment

    async def revoke_if_active(
        self, enrollment_id: UUID, now: datetime
    ) -> Enrollment | None:
        current = self._by_id.get(enrollment_id)
        if current is None or current.status != EnrollmentStatus.ACTIVE:
            return None
        updated = replace(current, status=EnrollmentStatus.REVOKED, updated_at=now)
        self._by_id[enrollment_id] = updated
        return updated
