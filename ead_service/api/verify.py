"""Public certificate verification.

Anyone holding a printed certificate can check it here; no credential is
read.  Both routes answer an unknown, empty or malformed code the same
way, and the HTML not-found page never repeats the submitted code.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from ead_service.api.dependencies import StoreDep
from ead_service.api.ratelimit import require_rate_limit
from ead_service.core.config import SETTINGS
from ead_service.core.errors import NotFound
from ead_service.models.certificate import CertificateSummary
from ead_service.services.rate_limiter import VERIFY_LIMIT
from ead_service.services.templates import VERIFY_FOUND, VERIFY_NOT_FOUND, render
from ead_service.services.verifier import PublicVerifier

router = APIRouter(
    tags=["verify"],
    dependencies=[Depends(require_rate_limit(VERIFY_LIMIT, scope="verify"))],
)


class CertificateSummaryOut(BaseModel):
    holder_name: str
    course_title: str
    issued_at: datetime
    validation_code: str


@router.get("/api/verify/{code}", response_model=CertificateSummaryOut)
async def verify_json(code: str, store: StoreDep) -> CertificateSummaryOut:
    summary = await PublicVerifier(store).verify(code)
    return CertificateSummaryOut(
        holder_name=summary.holder_name,
        course_title=summary.course_title,
        issued_at=summary.issued_at,
        validation_code=summary.validation_code,
    )


# An empty code takes the same lookup path as an unknown one.
@router.get("/api/verify/", response_model=CertificateSummaryOut)
async def verify_json_empty(store: StoreDep) -> CertificateSummaryOut:
    return await verify_json("", store)


@router.get("/verify/{code}", response_class=HTMLResponse)
async def verify_page(code: str, store: StoreDep) -> HTMLResponse:
    try:
        summary = await PublicVerifier(store).verify(code)
    except NotFound:
        return HTMLResponse(render(VERIFY_NOT_FOUND), status_code=404)
    return HTMLResponse(render_certificate_page(summary))


@router.get("/verify/", response_class=HTMLResponse)
async def verify_page_empty(store: StoreDep) -> HTMLResponse:
    return await verify_page("", store)


def render_certificate_page(
    summary: CertificateSummary, site_name: str = SETTINGS.site_name
) -> str:
    return render(
        VERIFY_FOUND,
        holder_name=summary.holder_name,
        course_title=summary.course_title,
        issued_on=summary.issued_at.strftime("%d/%m/%Y"),
        validation_code=summary.validation_code,
        site_name=site_name,
    )
