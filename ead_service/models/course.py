from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    description: str = ""
    price: Decimal | None = None
    thumbnail_url: str | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None

    @staticmethod
    def new(
        *,
        title: str,
        description: str = "",
        price: Decimal | None = None,
        thumbnail_url: str | None = None,
        created_by: UUID | None = None,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title,
            description=description,
            price=price,
            thumbnail_url=thumbnail_url,
            created_by=created_by,
            created_at=datetime.now(UTC),
        )


@dataclass(frozen=True, slots=True)
class Module:
    id: UUID
    course_id: UUID
    title: str
    position: int

    @staticmethod
    def new(*, course_id: UUID, title: str, position: int) -> Module:
        return Module(id=uuid4(), course_id=course_id, title=title, position=position)


@dataclass(frozen=True, slots=True)
class Lesson:
    """Completion unit.  Belongs to a course through its module."""

    id: UUID
    module_id: UUID
    title: str
    position: int
    duration_seconds: int = 0

    @staticmethod
    def new(
        *, module_id: UUID, title: str, position: int, duration_seconds: int = 0
    ) -> Lesson:
        return Lesson(
            id=uuid4(),
            module_id=module_id,
            title=title,
            position=position,
            duration_seconds=duration_seconds,
        )


@dataclass(frozen=True, slots=True)
class ModuleOutline:
    module: Module
    lessons: tuple[Lesson, ...] = ()


@dataclass(frozen=True, slots=True)
class CourseOutline:
    """Course with its modules and lessons, both sorted by position."""

    course: Course
    modules: tuple[ModuleOutline, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class CourseSummary:
    course: Course
    enrollment_count: int = 0
