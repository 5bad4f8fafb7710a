from __future__ import annotations

from typing import Protocol
from uuid import UUID

from ead_service.models.course import (
    Course,
    CourseOutline,
    Lesson,
    Module,
    ModuleOutline,
)


class CourseRepo(Protocol):
    """Read side of the externally managed course content.

    Only course creation and the content seeding used by tests/dev write here.
    """

    async def get(self, course_id: UUID) -> Course | None: ...
    async def list_all(self) -> list[Course]: ...
    async def add(self, course: Course) -> None: ...
    async def add_module(self, module: Module) -> None: ...
    async def add_lesson(self, lesson: Lesson) -> None: ...
    async def lesson_ids(self, course_id: UUID) -> list[UUID]: ...
    async def course_id_for_lesson(self, lesson_id: UUID) -> UUID | None: ...
    async def outline(self, course_id: UUID) -> CourseOutline | None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._modules: dict[UUID, Module] = {}
        self._lessons: dict[UUID, Lesson] = {}

    async def get(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def list_all(self) -> list[Course]:
        # Newest first, same as the admin listing in Postgres.
        return sorted(
            self._courses.values(),
            key=lambda c: c.created_at.timestamp() if c.created_at else 0.0,
            reverse=True,
        )

    async def add(self, course: Course) -> None:
        self._courses[course.id] = course

    async def add_module(self, module: Module) -> None:
        if module.course_id not in self._courses:
            raise KeyError("course not found")
        self._modules[module.id] = module

    async def add_lesson(self, lesson: Lesson) -> None:
        if lesson.module_id not in self._modules:
            raise KeyError("module not found")
        self._lessons[lesson.id] = lesson

    async def lesson_ids(self, course_id: UUID) -> list[UUID]:
        module_ids = {m.id for m in self._modules.values() if m.course_id == course_id}
        return [l.id for l in self._lessons.values() if l.module_id in module_ids]

    async def course_id_for_lesson(self, lesson_id: UUID) -> UUID | None:
        lesson = self._lessons.get(lesson_id)
        if lesson is None:
            return None
        return self._modules[lesson.module_id].course_id

    async def outline(self, course_id: UUID) -> CourseOutline | None:
        course = self._courses.get(course_id)
        if course is None:
            return None
        modules = sorted(
            (m for m in self._modules.values() if m.course_id == course_id),
            key=lambda m: m.position,
        )
        return CourseOutline(
            course=course,
            modules=tuple(
                ModuleOutline(
                    module=m,
                    lessons=tuple(
                        sorted(
                            (l for l in self._lessons.values() if l.module_id == m.id),
                            key=lambda l: l.position,
                        )
                    ),
                )
                for m in modules
            ),
        )
