"""Lesson progress reporting.

A mark is only accepted for a lesson that exists and belongs to a course
the student can currently access; expired or revoked students cannot keep
accumulating completion toward a certificate.
"""

from __future__ import annotations

import logging
from uuid import UUID

from ead_service.core.clock import Clock, utc_now
from ead_service.core.errors import LessonNotFound
from ead_service.models.progress import ProgressMark
from ead_service.repos.store import Store
from ead_service.services.enrollment_ledger import EnrollmentLedger

logger = logging.getLogger(__name__)


class ProgressTracker:
    def __init__(self, store: Store, ledger: EnrollmentLedger, clock: Clock = utc_now) -> None:
        self._store = store
        self._ledger = ledger
        self._clock = clock

    async def report(self, account_id: UUID, lesson_id: UUID, is_completed: bool) -> ProgressMark:
        course_id = await self._store.courses.course_id_for_lesson(lesson_id)
        if course_id is None:
            raise LessonNotFound()
        await self._ledger.require_access(account_id, course_id)

        mark = ProgressMark.report(
            account_id=account_id,
            lesson_id=lesson_id,
            is_completed=is_completed,
            now=self._clock(),
        )
        await self._store.progress.upsert(mark)
        logger.debug(
            "Progress account=%s lesson=%s completed=%s",
            account_id,
            lesson_id,
            is_completed,
        )
        return mark
