"""Grant notifications: decide whether to notify and with which facts.

The ledger reports newly_provisioned; this module turns a grant into a
GrantNotice (recipient, new-account flag, course title, setup link) and
hands it to the task queue.  Rendering and SMTP delivery happen in the
worker (see ead_service.mailer).  The link handle comes from the token
service; the ledger never generates it.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from urllib.parse import urlencode

from ead_service.core.config import SETTINGS
from ead_service.core.metrics import NOTIFICATIONS
from ead_service.models.course import Course
from ead_service.services import token_service
from ead_service.services.enrollment_ledger import GrantResult
from ead_service.services.task_queue import NOTIFICATION_QUEUE, TaskQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GrantNotice:
    recipient: str
    newly_provisioned: bool
    course_title: str
    link: str

    @staticmethod
    def from_payload(payload: dict) -> GrantNotice:
        return GrantNotice(
            recipient=payload["recipient"],
            newly_provisioned=bool(payload["newly_provisioned"]),
            course_title=payload["course_title"],
            link=payload["link"],
        )


def setup_link(recipient_id: str, email: str) -> str:
    token = token_service.create_setup_token(sub=recipient_id, email=email)
    return f"{SETTINGS.site_url}/setup-password?{urlencode({'token': token})}"


def build_grant_notice(result: GrantResult, course: Course) -> GrantNotice:
    return GrantNotice(
        recipient=result.account.email,
        newly_provisioned=result.newly_provisioned,
        course_title=course.title,
        link=setup_link(str(result.account.id), result.account.email),
    )


class NotificationDispatcher:
    def __init__(self, queue: TaskQueue) -> None:
        self._queue = queue

    async def dispatch(self, notice: GrantNotice) -> bool:
        """Enqueue the notice.  Returns False (and logs) if the queue is down.

        The grant has already been committed by the time this runs; a queue
        outage is reported to the caller, not turned into a failed grant.
        """
        try:
            task = await self._queue.enqueue(NOTIFICATION_QUEUE, asdict(notice))
        except Exception:
            NOTIFICATIONS.labels(result="enqueue_failed").inc()
            logger.exception("Could not enqueue grant notification")
            return False
        NOTIFICATIONS.labels(result="queued").inc()
        logger.info(
            "Grant notification queued task=%s new_account=%s",
            task.id,
            notice.newly_provisioned,
        )
        return True
