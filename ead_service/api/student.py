from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ead_service.api.dependencies import CurrentIdentity, StoreDep
from ead_service.api.ratelimit import require_rate_limit
from ead_service.api.schemas import CertificateOut, CourseOut
from ead_service.models.course import CourseOutline
from ead_service.services.catalog import Catalog
from ead_service.services.certificate_issuer import CertificateIssuer
from ead_service.services.enrollment_ledger import EnrollmentLedger
from ead_service.services.progress import ProgressTracker
from ead_service.services.rate_limiter import RateLimitConfig

router = APIRouter(prefix="/api/student", tags=["student"])


class LessonOut(BaseModel):
    id: UUID
    title: str
    position: int
    duration_seconds: int


class ModuleOut(BaseModel):
    id: UUID
    title: str
    position: int
    lessons: list[LessonOut]


class CourseDetailOut(CourseOut):
    modules: list[ModuleOut]

    @staticmethod
    def from_outline(outline: CourseOutline) -> CourseDetailOut:
        return CourseDetailOut(
            **CourseOut.build(outline.course).model_dump(),
            modules=[
                ModuleOut(
                    id=m.module.id,
                    title=m.module.title,
                    position=m.module.position,
                    lessons=[
                        LessonOut(
                            id=l.id,
                            title=l.title,
                            position=l.position,
                            duration_seconds=l.duration_seconds,
                        )
                        for l in m.lessons
                    ],
                )
                for m in outline.modules
            ],
        )


class StudentCourseOut(BaseModel):
    enrollment_id: UUID
    status: str
    access_end_at: datetime | None
    course: CourseOut


class ProgressIn(BaseModel):
    lesson_id: UUID
    is_completed: bool


class ProgressOut(BaseModel):
    success: bool


class CertificateRequestIn(BaseModel):
    course_id: UUID


@router.get("/courses", response_model=list[StudentCourseOut])
async def my_courses(identity: CurrentIdentity, store: StoreDep) -> list[StudentCourseOut]:
    rows = await Catalog(store, EnrollmentLedger(store)).student_courses(
        identity.account.id
    )
    return [
        StudentCourseOut(
            enrollment_id=enrollment.id,
            status=str(enrollment.status),
            access_end_at=enrollment.access_end_at,
            course=CourseOut.build(course),
        )
        for enrollment, course in rows
    ]


@router.get("/courses/{course_id}", response_model=CourseDetailOut)
async def course_detail(
    course_id: UUID, identity: CurrentIdentity, store: StoreDep
) -> CourseDetailOut:
    outline = await Catalog(store, EnrollmentLedger(store)).student_outline(
        identity.account.id, course_id
    )
    return CourseDetailOut.from_outline(outline)


@router.post("/progress", response_model=ProgressOut)
async def report_progress(
    body: ProgressIn, identity: CurrentIdentity, store: StoreDep
) -> ProgressOut:
    tracker = ProgressTracker(store, EnrollmentLedger(store))
    await tracker.report(identity.account.id, body.lesson_id, body.is_completed)
    return ProgressOut(success=True)


@router.post(
    "/certificates",
    response_model=CertificateOut,
    dependencies=[
        Depends(
            require_rate_limit(
                RateLimitConfig(capacity=10, refill_rate=0.2), scope="certificates"
            )
        )
    ],
)
async def request_certificate(
    body: CertificateRequestIn, identity: CurrentIdentity, store: StoreDep
) -> CertificateOut:
    certificate = await CertificateIssuer(store).issue(identity.account.id, body.course_id)
    return CertificateOut.build(certificate)
