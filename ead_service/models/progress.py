from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ProgressMark:
    """One account's completion state for one lesson.

    Upserted on (account_id, lesson_id); completed_at is set iff completed.
    """

    account_id: UUID
    lesson_id: UUID
    is_completed: bool
    completed_at: datetime | None = None
    last_watched_at: datetime | None = None

    @staticmethod
    def report(
        *, account_id: UUID, lesson_id: UUID, is_completed: bool, now: datetime
    ) -> ProgressMark:
        return ProgressMark(
            account_id=account_id,
            lesson_id=lesson_id,
            is_completed=is_completed,
            completed_at=now if is_completed else None,
            last_watched_at=now,
        )
