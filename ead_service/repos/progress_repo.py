from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from ead_service.models.progress import ProgressMark


class ProgressRepo(Protocol):
    async def upsert(self, mark: ProgressMark) -> None: ...
    async def get(self, account_id: UUID, lesson_id: UUID) -> ProgressMark | None: ...
    async def count_completed(
        self, account_id: UUID, lesson_ids: Iterable[UUID]
    ) -> int: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._marks: dict[tuple[UUID, UUID], ProgressMark] = {}

    async def upsert(self, mark: ProgressMark) -> None:
        self._marks[(mark.account_id, mark.lesson_id)] = mark

    async def get(self, account_id: UUID, lesson_id: UUID) -> ProgressMark | None:
        return self._marks.get((account_id, lesson_id))

    async def count_completed(
        self, account_id: UUID, lesson_ids: Iterable[UUID]
    ) -> int:
        count = 0
        for lesson_id in set(lesson_ids):
            mark = self._marks.get((account_id, lesson_id))
            if mark is not None and mark.is_completed:
                count += 1
        return count
