from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from ead_service.core.errors import InvalidCourse
from ead_service.models.account import Account
from ead_service.models.audit import AuditAction, AuditEntry
from ead_service.models.course import Course, CourseOutline, CourseSummary
from ead_service.models.enrollment import Enrollment
from ead_service.repos.store import Store
from ead_service.services.enrollment_ledger import EnrollmentLedger

logger = logging.getLogger(__name__)


class Catalog:
    """Admin-side course management and the student course views.

    Student views go through the ledger's access check; a course the
    student cannot currently access is reported as AccessExpired, never
    as "not found", so clients can show a renewal prompt.
    """

    def __init__(self, store: Store, ledger: EnrollmentLedger) -> None:
        self._store = store
        self._ledger = ledger

    async def create_course(
        self,
        actor: Account,
        *,
        title: str,
        description: str = "",
        price: Decimal | None = None,
        thumbnail_url: str | None = None,
    ) -> Course:
        course = Course.new(
            title=title,
            description=description,
            price=price,
            thumbnail_url=thumbnail_url,
            created_by=actor.id,
        )
        await self._store.courses.add(course)
        await self._store.audit.append(
            AuditEntry.new(
                actor_id=actor.id,
                action=AuditAction.CREATE_COURSE,
                entity_type="courses",
                entity_id=course.id,
                details={"title": title},
                now=course.created_at,
            )
        )
        logger.info(
            "Course created id=%s title=%r",
            course.id,
            title,
            extra={"actor_id": str(actor.id), "course_id": str(course.id)},
        )
        return course

    async def list_with_counts(self) -> list[CourseSummary]:
        counts = await self._store.enrollments.count_by_course()
        return [
            CourseSummary(course=c, enrollment_count=counts.get(c.id, 0))
            for c in await self._store.courses.list_all()
        ]

    async def student_courses(self, account_id: UUID) -> list[tuple[Enrollment, Course]]:
        return await self._ledger.active_courses(account_id)

    async def student_outline(self, account_id: UUID, course_id: UUID) -> CourseOutline:
        await self._ledger.require_access(account_id, course_id)
        outline = await self._store.courses.outline(course_id)
        if outline is None:
            # Enrollment points at a course that no longer exists.
            logger.error("Enrollment for missing course=%s", course_id)
            raise InvalidCourse(course_id)
        return outline
