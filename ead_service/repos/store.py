"""The storage boundary handed to the services.

A Store bundles one repo per aggregate.  The API builds one per request:
the process-wide in-memory store when no DATABASE_URL is configured,
otherwise Postgres repos sharing the request's session (one transaction).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ead_service.repos.account_repo import AccountRepo, InMemoryAccountRepo
from ead_service.repos.audit_repo import AuditRepo, InMemoryAuditRepo
from ead_service.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from ead_service.repos.course_repo import CourseRepo, InMemoryCourseRepo
from ead_service.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from ead_service.repos.pg_account_repo import PgAccountRepo
from ead_service.repos.pg_audit_repo import PgAuditRepo
from ead_service.repos.pg_certificate_repo import PgCertificateRepo
from ead_service.repos.pg_course_repo import PgCourseRepo
from ead_service.repos.pg_enrollment_repo import PgEnrollmentRepo
from ead_service.repos.pg_progress_repo import PgProgressRepo
from ead_service.repos.progress_repo import InMemoryProgressRepo, ProgressRepo


@dataclass(frozen=True, slots=True)
class Store:
    accounts: AccountRepo
    courses: CourseRepo
    enrollments: EnrollmentRepo
    progress: ProgressRepo
    certificates: CertificateRepo
    audit: AuditRepo


def in_memory_store() -> Store:
    return Store(
        accounts=InMemoryAccountRepo(),
        courses=InMemoryCourseRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        progress=InMemoryProgressRepo(),
        certificates=InMemoryCertificateRepo(),
        audit=InMemoryAuditRepo(),
    )


def pg_store(session: AsyncSession) -> Store:
    return Store(
        accounts=PgAccountRepo(session),
        courses=PgCourseRepo(session),
        enrollments=PgEnrollmentRepo(session),
        progress=PgProgressRepo(session),
        certificates=PgCertificateRepo(session),
        audit=PgAuditRepo(session),
    )
