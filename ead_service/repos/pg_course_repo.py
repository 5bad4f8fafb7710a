"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.db.tables import CourseRow, LessonRow, ModuleRow
from ead_service.models.course import (
    Course,
    CourseOutline,
    Lesson,
    Module,
    ModuleOutline,
)


class PgCourseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def list_all(self) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at.desc())
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                title=course.title,
                description=course.description,
                price=course.price,
                thumbnail_url=course.thumbnail_url,
                created_by=course.created_by,
                created_at=course.created_at,
            )
        )
        await self._session.flush()

    async def add_module(self, module: Module) -> None:
        self._session.add(
            ModuleRow(
                id=module.id,
                course_id=module.course_id,
                title=module.title,
                position=module.position,
            )
        )
        await self._session.flush()

    async def add_lesson(self, lesson: Lesson) -> None:
        self._session.add(
            LessonRow(
                id=lesson.id,
                module_id=lesson.module_id,
                title=lesson.title,
                position=lesson.position,
                duration_seconds=lesson.duration_seconds,
            )
        )
        await self._session.flush()

    async def lesson_ids(self, course_id: UUID) -> list[UUID]:
        stmt = (
            select(LessonRow.id)
            .join(ModuleRow, LessonRow.module_id == ModuleRow.id)
            .where(ModuleRow.course_id == course_id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def course_id_for_lesson(self, lesson_id: UUID) -> UUID | None:
        stmt = (
            select(ModuleRow.course_id)
            .join(LessonRow, LessonRow.module_id == ModuleRow.id)
            .where(LessonRow.id == lesson_id)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def outline(self, course_id: UUID) -> CourseOutline | None:
        course = await self.get(course_id)
        if course is None:
            return None

        module_rows = (
            (
                await self._session.execute(
                    select(ModuleRow)
                    .where(ModuleRow.course_id == course_id)
                    .order_by(ModuleRow.position)
                )
            )
            .scalars()
            .all()
        )
        lessons_by_module: dict[UUID, list[Lesson]] = {m.id: [] for m in module_rows}
        if module_rows:
            lesson_rows = (
                (
                    await self._session.execute(
                        select(LessonRow)
                        .where(LessonRow.module_id.in_(list(lessons_by_module)))
                        .order_by(LessonRow.position)
                    )
                )
                .scalars()
                .all()
            )
            for r in lesson_rows:
                lessons_by_module[r.module_id].append(
                    Lesson(
                        id=r.id,
                        module_id=r.module_id,
                        title=r.title,
                        position=r.position,
                        duration_seconds=r.duration_seconds,
                    )
                )

        return CourseOutline(
            course=course,
            modules=tuple(
                ModuleOutline(
                    module=Module(
                        id=m.id, course_id=m.course_id, title=m.title, position=m.position
                    ),
                    lessons=tuple(lessons_by_module[m.id]),
                )
                for m in module_rows
            ),
        )


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description or "",
        price=row.price,
        thumbnail_url=row.thumbnail_url,
        created_by=row.created_by,
        created_at=row.created_at,
    )
