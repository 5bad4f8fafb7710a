"""Response models shared by the admin and student routers."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from ead_service.models.certificate import Certificate
from ead_service.models.course import Course
from ead_service.models.enrollment import Enrollment


class EnrollmentOut(BaseModel):
    id: UUID
    account_id: UUID
    course_id: UUID
    status: str
    access_end_at: datetime | None
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None

    @staticmethod
    def build(enrollment: Enrollment, *, is_active: bool) -> EnrollmentOut:
        return EnrollmentOut(
            id=enrollment.id,
            account_id=enrollment.account_id,
            course_id=enrollment.course_id,
            status=str(enrollment.status),
            access_end_at=enrollment.access_end_at,
            is_active=is_active,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
        )


class CourseOut(BaseModel):
    id: UUID
    title: str
    description: str
    price: Decimal | None
    thumbnail_url: str | None
    created_at: datetime | None

    @staticmethod
    def build(course: Course) -> CourseOut:
        return CourseOut(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            thumbnail_url=course.thumbnail_url,
            created_at=course.created_at,
        )


class CertificateOut(BaseModel):
    id: UUID
    account_id: UUID
    course_id: UUID
    validation_code: str
    issued_at: datetime

    @staticmethod
    def build(certificate: Certificate) -> CertificateOut:
        return CertificateOut(
            id=certificate.id,
            account_id=certificate.account_id,
            course_id=certificate.course_id,
            validation_code=certificate.validation_code,
            issued_at=certificate.issued_at,
        )
