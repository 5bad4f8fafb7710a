"""Certificate issuer: idempotent, completion-gated minting.

ORDER OF CHECKS
----------------
  1. existing certificate?      -> return it unchanged (no new code)
  2. course exists?             -> else InvalidCourse
  3. all lessons completed?     -> else IncompleteProgress(completed, total)
  4. enrollment effective now?  -> else AccessExpired
  5. allocate a validation code and insert

AT MOST ONE CERTIFICATE
------------------------
Two requests for the same (account, course) can both pass step 1 before
either inserts.  The store enforces uniqueness on (account, course); the
loser of that race gets DuplicateKeyError and returns the winner's row,
so both callers see the same validation code.

A collision on the validation code itself is a different duplicate: it
means "draw again", bounded by MAX_CODE_ATTEMPTS.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from uuid import UUID

from ead_service.core.clock import Clock, utc_now
from ead_service.core.errors import (
    AccessExpired,
    CodeGenerationFailed,
    DuplicateKeyError,
    IncompleteProgress,
    InvalidCourse,
)
from ead_service.core.metrics import CERTIFICATE_REQUESTS
from ead_service.models.account import Account
from ead_service.models.audit import AuditAction, AuditEntry
from ead_service.models.certificate import Certificate
from ead_service.repos.certificate_repo import ACCOUNT_COURSE_KEY
from ead_service.repos.store import Store
from ead_service.services.completion import CompletionEvaluator
from ead_service.services.enrollment_ledger import EnrollmentLedger

logger = logging.getLogger(__name__)

# No 0/O or 1/I/L: codes are read off paper and typed by hand.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 5


def generate_validation_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_validation_code(code: str) -> str:
    return code.strip().upper()


class CertificateIssuer:
    def __init__(
        self,
        store: Store,
        *,
        clock: Clock = utc_now,
        code_factory: Callable[[], str] = generate_validation_code,
    ) -> None:
        self._store = store
        self._clock = clock
        self._code_factory = code_factory
        self._evaluator = CompletionEvaluator(store.courses, store.progress)
        self._ledger = EnrollmentLedger(store, clock=clock)

    async def issue(
        self, account_id: UUID, course_id: UUID, *, actor: Account | None = None
    ) -> Certificate:
        """Issue (or return) the certificate for account_id in course_id.

        actor is set when an admin issues on a student's behalf; that path
        is audited.  Self-service issuance is not.
        """
        existing = await self._store.certificates.get_for(account_id, course_id)
        if existing is not None:
            CERTIFICATE_REQUESTS.labels(outcome="existing").inc()
            return existing

        if await self._store.courses.get(course_id) is None:
            CERTIFICATE_REQUESTS.labels(outcome="invalid_course").inc()
            raise InvalidCourse(course_id)

        result = await self._evaluator.evaluate(account_id, course_id)
        if not result.is_satisfied:
            CERTIFICATE_REQUESTS.labels(outcome="incomplete").inc()
            logger.info(
                "Certificate refused account=%s course=%s progress=%d/%d",
                account_id,
                course_id,
                result.completed_units,
                result.total_units,
            )
            raise IncompleteProgress(result.completed_units, result.total_units)

        try:
            await self._ledger.require_access(account_id, course_id)
        except AccessExpired:
            CERTIFICATE_REQUESTS.labels(outcome="access_expired").inc()
            raise

        certificate = await self._insert_once(account_id, course_id)
        if certificate is None:
            # Lost the race to a concurrent request; return its row.
            winner = await self._store.certificates.get_for(account_id, course_id)
            if winner is None:
                raise RuntimeError("certificate uniqueness violated but no row found")
            CERTIFICATE_REQUESTS.labels(outcome="existing").inc()
            return winner

        if actor is not None:
            await self._store.audit.append(
                AuditEntry.new(
                    actor_id=actor.id,
                    action=AuditAction.ISSUE_CERTIFICATE,
                    entity_type="certificates",
                    entity_id=certificate.id,
                    details={
                        "target_account_id": str(account_id),
                        "course_id": str(course_id),
                        "validation_code": certificate.validation_code,
                    },
                    now=certificate.issued_at,
                )
            )

        CERTIFICATE_REQUESTS.labels(outcome="issued").inc()
        logger.info(
            "Certificate issued id=%s account=%s course=%s",
            certificate.id,
            account_id,
            course_id,
            extra={"account_id": str(account_id), "course_id": str(course_id)},
        )
        return certificate

    async def _insert_once(self, account_id: UUID, course_id: UUID) -> Certificate | None:
        """Insert with a fresh code.  None means (account, course) already issued."""
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            certificate = Certificate.new(
                account_id=account_id,
                course_id=course_id,
                validation_code=self._code_factory(),
                now=self._clock(),
            )
            try:
                await self._store.certificates.add(certificate)
            except DuplicateKeyError as e:
                if e.key == ACCOUNT_COURSE_KEY:
                    return None
                logger.warning(
                    "Validation code collision, attempt %d/%d", attempt, MAX_CODE_ATTEMPTS
                )
                continue
            return certificate

        logger.error(
            "Gave up allocating a validation code account=%s course=%s",
            account_id,
            course_id,
        )
        raise CodeGenerationFailed()
