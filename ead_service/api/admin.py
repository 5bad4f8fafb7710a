from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ead_service.api.dependencies import AdminIdentity, StoreDep
from ead_service.api.ratelimit import require_rate_limit
from ead_service.api.schemas import CertificateOut, CourseOut, EnrollmentOut
from ead_service.core.errors import InvalidTarget
from ead_service.services.catalog import Catalog
from ead_service.services.certificate_issuer import CertificateIssuer
from ead_service.services.enrollment_ledger import EnrollmentLedger
from ead_service.services.notifications import NotificationDispatcher, build_grant_notice
from ead_service.services.rate_limiter import RateLimitConfig
from ead_service.services.task_queue import task_queue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class GrantIn(BaseModel):
    course_id: UUID
    user_id: UUID | None = None
    email: str | None = None
    days_valid: int | None = None


class GrantOut(BaseModel):
    enrollment: EnrollmentOut
    newly_provisioned: bool
    notification_queued: bool


class RevokeOut(BaseModel):
    enrollment: EnrollmentOut


class CourseIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: Decimal | None = Field(default=None, ge=0)
    thumbnail_url: str | None = None


class AdminCourseOut(CourseOut):
    enrollment_count: int


class IssueIn(BaseModel):
    user_id: UUID
    course_id: UUID


# ---------------------------------------------------------------------------
# Enrollments
# ---------------------------------------------------------------------------


@router.post("/enrollments", response_model=GrantOut)
async def grant_access(body: GrantIn, admin: AdminIdentity, store: StoreDep) -> GrantOut:
    ledger = EnrollmentLedger(store)
    result = await ledger.grant(
        admin.account,
        body.course_id,
        user_id=body.user_id,
        email=body.email,
        days_valid=body.days_valid,
    )

    course = await store.courses.get(body.course_id)
    queued = False
    if course is not None:
        notice = build_grant_notice(result, course)
        queued = await NotificationDispatcher(task_queue).dispatch(notice)

    return GrantOut(
        enrollment=EnrollmentOut.build(
            result.enrollment, is_active=ledger.is_effectively_active(result.enrollment)
        ),
        newly_provisioned=result.newly_provisioned,
        notification_queued=queued,
    )


@router.put("/enrollments/{enrollment_id}/revoke", response_model=RevokeOut)
async def revoke_access(
    enrollment_id: UUID, admin: AdminIdentity, store: StoreDep
) -> RevokeOut:
    ledger = EnrollmentLedger(store)
    enrollment = await ledger.revoke(admin.account, enrollment_id)
    return RevokeOut(
        enrollment=EnrollmentOut.build(
            enrollment, is_active=ledger.is_effectively_active(enrollment)
        )
    )


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


@router.get("/courses", response_model=list[AdminCourseOut])
async def list_courses(admin: AdminIdentity, store: StoreDep) -> list[AdminCourseOut]:
    logger.info("Admin course list requested by account=%s", admin.account.id)
    summaries = await Catalog(store, EnrollmentLedger(store)).list_with_counts()
    return [
        AdminCourseOut(
            **CourseOut.build(s.course).model_dump(), enrollment_count=s.enrollment_count
        )
        for s in summaries
    ]


@router.post("/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(body: CourseIn, admin: AdminIdentity, store: StoreDep) -> CourseOut:
    course = await Catalog(store, EnrollmentLedger(store)).create_course(
        admin.account,
        title=body.title,
        description=body.description,
        price=body.price,
        thumbnail_url=body.thumbnail_url,
    )
    return CourseOut.build(course)


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------


@router.post(
    "/certificates",
    response_model=CertificateOut,
    dependencies=[
        Depends(
            require_rate_limit(
                RateLimitConfig(capacity=20, refill_rate=0.5), scope="admin-certificates"
            )
        )
    ],
)
async def issue_for_student(
    body: IssueIn, admin: AdminIdentity, store: StoreDep
) -> CertificateOut:
    if await store.accounts.get_by_id(body.user_id) is None:
        raise InvalidTarget(f"account {body.user_id} does not exist")
    certificate = await CertificateIssuer(store).issue(
        body.user_id, body.course_id, actor=admin.account
    )
    return CertificateOut.build(certificate)
