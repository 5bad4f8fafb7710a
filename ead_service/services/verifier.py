"""Public certificate verifier.

No authentication, read-only.  The summary carries only what a printed
certificate already shows: holder name, course title, issue date, code.

Every input takes the same path (normalize, one lookup, NotFound on a
miss), so an empty or malformed code is indistinguishable from an unknown
one in both response shape and work done.
"""

from __future__ import annotations

import logging

from ead_service.core.errors import NotFound
from ead_service.core.metrics import CERTIFICATE_VERIFICATIONS
from ead_service.models.certificate import CertificateSummary
from ead_service.repos.store import Store
from ead_service.services.certificate_issuer import normalize_validation_code

logger = logging.getLogger(__name__)


class PublicVerifier:
    def __init__(self, store: Store) -> None:
        self._store = store

    async def verify(self, code: str) -> CertificateSummary:
        normalized = normalize_validation_code(code)
        certificate = await self._store.certificates.get_by_code(normalized)
        if certificate is None:
            CERTIFICATE_VERIFICATIONS.labels(result="not_found").inc()
            raise NotFound()

        holder = await self._store.accounts.get_by_id(certificate.account_id)
        course = await self._store.courses.get(certificate.course_id)
        if holder is None or course is None:
            # Referential damage; report it, but answer like any unknown code.
            logger.error(
                "Certificate %s references a missing account or course",
                certificate.id,
            )
            CERTIFICATE_VERIFICATIONS.labels(result="not_found").inc()
            raise NotFound()

        CERTIFICATE_VERIFICATIONS.labels(result="found").inc()
        return CertificateSummary(
            holder_name=holder.display_name,
            course_title=course.title,
            issued_at=certificate.issued_at,
            validation_code=certificate.validation_code,
        )
