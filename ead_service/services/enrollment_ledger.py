"""Enrollment ledger: grant / revoke / expire for (account, course) pairs.

STATE MACHINE
--------------
  states:       active, revoked
  initial:      active
  transitions:  active -> revoked   (admin revoke)

There is no revoked -> active edge.  A later grant re-enters the initial
state on the same row and is audited as a new GRANT_ACCESS, not as an
"un-revoke".  Expiry is not a state: an active row whose access_end_at has
passed is simply not effectively active (see is_effectively_active).

Writes go through single-statement repo operations keyed on the natural
key, so concurrent grants cannot duplicate a row and a revoke can only
flip a row that is active at the moment it runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from ead_service.core.clock import Clock, utc_now
from ead_service.core.errors import (
    AccessExpired,
    DuplicateKeyError,
    EnrollmentNotFound,
    InvalidCourse,
    InvalidDuration,
    InvalidTarget,
)
from ead_service.core.metrics import ENROLLMENT_CHANGES
from ead_service.models.account import Account, Role, normalize_email
from ead_service.models.audit import AuditAction, AuditEntry
from ead_service.models.course import Course
from ead_service.models.enrollment import (
    Enrollment,
    MAX_DAYS_VALID,
    EnrollmentStatus,
    compute_access_end,
    is_effectively_active,
)
from ead_service.repos.store import Store

logger = logging.getLogger(__name__)

ENTITY_TYPE = "enrollments"


@dataclass(frozen=True, slots=True)
class GrantResult:
    """Outcome of a grant.

    newly_provisioned tells the caller whether the notification should be an
    account-setup invite rather than an "access updated" notice.
    """

    enrollment: Enrollment
    account: Account
    newly_provisioned: bool


class EnrollmentLedger:
    def __init__(self, store: Store, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    # ------------------------------------------------------------------
    # Admin mutations
    # ------------------------------------------------------------------

    async def grant(
        self,
        actor: Account,
        course_id: UUID,
        *,
        user_id: UUID | None = None,
        email: str | None = None,
        days_valid: int | None = None,
    ) -> GrantResult:
        # Validate everything that can fail before the first write.
        if days_valid is not None and days_valid > MAX_DAYS_VALID:
            raise InvalidDuration(days_valid, MAX_DAYS_VALID)
        if await self._store.courses.get(course_id) is None:
            raise InvalidCourse(course_id)

        account, newly_provisioned = await self._resolve_target(user_id, email)

        now = self._clock()
        access_end_at = compute_access_end(now, days_valid)
        enrollment = await self._store.enrollments.upsert_active(
            account.id, course_id, access_end_at, now
        )

        await self._store.audit.append(
            AuditEntry.new(
                actor_id=actor.id,
                action=AuditAction.GRANT_ACCESS,
                entity_type=ENTITY_TYPE,
                entity_id=enrollment.id,
                details={
                    "target_account_id": str(account.id),
                    "course_id": str(course_id),
                    "days_valid": days_valid,
                    "access_end_at": access_end_at.isoformat() if access_end_at else None,
                    "newly_provisioned": newly_provisioned,
                },
                now=now,
            )
        )
        ENROLLMENT_CHANGES.labels(action="grant").inc()
        logger.info(
            "Access granted enrollment=%s account=%s course=%s until=%s new_account=%s",
            enrollment.id,
            account.id,
            course_id,
            access_end_at.isoformat() if access_end_at else "unlimited",
            newly_provisioned,
            extra={
                "actor_id": str(actor.id),
                "account_id": str(account.id),
                "course_id": str(course_id),
            },
        )
        return GrantResult(
            enrollment=enrollment, account=account, newly_provisioned=newly_provisioned
        )

    async def revoke(self, actor: Account, enrollment_id: UUID) -> Enrollment:
        now = self._clock()
        revoked = await self._store.enrollments.revoke_if_active(enrollment_id, now)

        if revoked is None:
            current = await self._store.enrollments.get(enrollment_id)
            if current is None:
                raise EnrollmentNotFound()
            # Already revoked: idempotent success, nothing to audit.
            ENROLLMENT_CHANGES.labels(action="revoke_noop").inc()
            logger.info("Revoke no-op, enrollment=%s already revoked", enrollment_id)
            return current

        await self._store.audit.append(
            AuditEntry.new(
                actor_id=actor.id,
                action=AuditAction.REVOKE_ACCESS,
                entity_type=ENTITY_TYPE,
                entity_id=revoked.id,
                details={
                    "target_account_id": str(revoked.account_id),
                    "course_id": str(revoked.course_id),
                },
                now=now,
            )
        )
        ENROLLMENT_CHANGES.labels(action="revoke").inc()
        logger.info(
            "Access revoked enrollment=%s account=%s course=%s",
            revoked.id,
            revoked.account_id,
            revoked.course_id,
            extra={"actor_id": str(actor.id), "account_id": str(revoked.account_id)},
        )
        return revoked

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def is_effectively_active(self, enrollment: Enrollment) -> bool:
        return is_effectively_active(enrollment, self._clock())

    async def require_access(self, account_id: UUID, course_id: UUID) -> Enrollment:
        """Return the enrollment if it is effectively active, else AccessExpired."""
        enrollment = await self._store.enrollments.get_for(account_id, course_id)
        if enrollment is None:
            raise AccessExpired("not_enrolled")
        if not self.is_effectively_active(enrollment):
            reason = (
                "revoked" if enrollment.status == EnrollmentStatus.REVOKED else "expired"
            )
            raise AccessExpired(reason)
        return enrollment

    async def active_courses(self, account_id: UUID) -> list[tuple[Enrollment, Course]]:
        result: list[tuple[Enrollment, Course]] = []
        for enrollment in await self._store.enrollments.list_for_account(account_id):
            if not self.is_effectively_active(enrollment):
                continue
            course = await self._store.courses.get(enrollment.course_id)
            if course is not None:
                result.append((enrollment, course))
        return result

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    async def _resolve_target(
        self, user_id: UUID | None, email: str | None
    ) -> tuple[Account, bool]:
        if user_id is not None:
            account = await self._store.accounts.get_by_id(user_id)
            if account is None:
                raise InvalidTarget(f"account {user_id} does not exist")
            return account, False

        if email is None:
            raise InvalidTarget()
        normalized = normalize_email(email)
        local, _, domain = normalized.partition("@")
        if not local or "." not in domain:
            raise InvalidTarget("email is not a valid address")

        existing = await self._store.accounts.get_by_email(normalized)
        if existing is not None:
            return existing, False

        # The one implicit account creation path: admin grant by email.
        account = Account.new(email=normalized, role=Role.STUDENT, now=self._clock())
        try:
            await self._store.accounts.add(account)
        except DuplicateKeyError:
            # A concurrent grant provisioned the same address first.
            winner = await self._store.accounts.get_by_email(normalized)
            if winner is None:
                raise
            return winner, False
        logger.info("Provisioned student account=%s", account.id)
        return account, True
