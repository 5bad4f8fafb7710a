"""Mail transport for grant notifications.

SmtpMailer talks to the configured SMTP server; smtplib is blocking, so
sends run in a worker thread.  Without SMTP_HOST (dev/MVP), LoggingMailer
logs the recipient and subject instead of sending.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from ead_service.core.config import SETTINGS, Settings
from ead_service.core.metrics import NOTIFICATIONS
from ead_service.services.notifications import GrantNotice
from ead_service.services.templates import (
    EXISTING_ACCOUNT_INTRO,
    GRANT_EMAIL,
    NEW_ACCOUNT_INTRO,
    render,
)

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    async def send(self, to: str, subject: str, html_body: str) -> None: ...


def render_grant_email(notice: GrantNotice, site_name: str) -> tuple[str, str]:
    subject = f"Acesso Liberado - {site_name}"
    body = render(
        GRANT_EMAIL,
        site_name=site_name,
        course_title=notice.course_title,
        intro=NEW_ACCOUNT_INTRO if notice.newly_provisioned else EXISTING_ACCOUNT_INTRO,
        link=notice.link,
    )
    return subject, body


class SmtpMailer:
    def __init__(self, settings: Settings) -> None:
        if settings.smtp_host is None:
            raise ValueError("SmtpMailer requires SMTP_HOST")
        self._settings = settings

    async def send(self, to: str, subject: str, html_body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self._settings.smtp_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Abra este e-mail em um cliente com suporte a HTML.")
        msg.add_alternative(html_body, subtype="html")
        await asyncio.to_thread(self._send_blocking, msg)

    def _send_blocking(self, msg: EmailMessage) -> None:
        s = self._settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=30) as smtp:  # type: ignore[arg-type]
            smtp.starttls()
            if s.smtp_user and s.smtp_password:
                smtp.login(s.smtp_user, s.smtp_password)
            smtp.send_message(msg)


class LoggingMailer:
    async def send(self, to: str, subject: str, html_body: str) -> None:
        logger.info("[mock email] to=%s subject=%r (%d bytes)", to, subject, len(html_body))


def build_mailer(settings: Settings = SETTINGS) -> Mailer:
    if settings.smtp_configured:
        return SmtpMailer(settings)
    return LoggingMailer()


async def deliver_grant_notice(
    notice: GrantNotice, mailer: Mailer, site_name: str = SETTINGS.site_name
) -> None:
    subject, body = render_grant_email(notice, site_name)
    try:
        await mailer.send(notice.recipient, subject, body)
    except Exception:
        NOTIFICATIONS.labels(result="send_failed").inc()
        raise
    NOTIFICATIONS.labels(
        result="logged" if isinstance(mailer, LoggingMailer) else "sent"
    ).inc()
