from __future__ import annotations

from typing import Protocol
from uuid import UUID

from ead_service.core.errors import DuplicateKeyError
from ead_service.models.certificate import Certificate

ACCOUNT_COURSE_KEY = "uq_certificates_account_course"
VALIDATION_CODE_KEY = "uq_certificates_validation_code"


class CertificateRepo(Protocol):
    async def get_for(self, account_id: UUID, course_id: UUID) -> Certificate | None: ...
    async def get_by_code(self, validation_code: str) -> Certificate | None: ...

    async def add(self, certificate: Certificate) -> None:
        """Insert once.

        Raises DuplicateKeyError(ACCOUNT_COURSE_KEY) when the account already
        holds a certificate for the course, DuplicateKeyError(VALIDATION_CODE_KEY)
        on a code collision.
        """
        ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[UUID, UUID], Certificate] = {}
        self._by_code: dict[str, Certificate] = {}

    async def get_for(self, account_id: UUID, course_id: UUID) -> Certificate | None:
        return self._by_key.get((account_id, course_id))

    async def get_by_code(self, validation_code: str) -> Certificate | None:
        return self._by_code.get(validation_code)

    async def add(self, certificate: Certificate) -> None:
        key = (certificate.account_id, certificate.course_id)
        if key in self._by_key:
            raise DuplicateKeyError(ACCOUNT_COURSE_KEY)
        if certificate.validation_code in self._by_code:
            raise DuplicateKeyError(VALIDATION_CODE_KEY)
        self._by_key[key] = certificate
        self._by_code[certificate.validation_code] = certificate
