from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ead_service.repos.course_repo import CourseRepo
from ead_service.repos.progress_repo import ProgressRepo


@dataclass(frozen=True, slots=True)
class CompletionResult:
    completed_units: int
    total_units: int

    @property
    def is_satisfied(self) -> bool:
        # An empty course is misconfigured, never vacuously complete.
        return self.total_units > 0 and self.completed_units >= self.total_units


class CompletionEvaluator:
    """Counts an account's completed lessons against a course's lessons."""

    def __init__(self, courses: CourseRepo, progress: ProgressRepo) -> None:
        self._courses = courses
        self._progress = progress

    async def evaluate(self, account_id: UUID, course_id: UUID) -> CompletionResult:
        lesson_ids = await self._courses.lesson_ids(course_id)
        if not lesson_ids:
            return CompletionResult(completed_units=0, total_units=0)
        completed = await self._progress.count_completed(account_id, lesson_ids)
        return CompletionResult(completed_units=completed, total_units=len(lesson_ids))
