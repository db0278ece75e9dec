"""
Email outbox.

Workflow code calls ``enqueue`` inside its own transaction; nothing is sent
until the request layer hands the committed ids to ``deliver`` (normally as a
background task). A failed send is recorded on the row and logged, so the
change that triggered it stays committed and reported as successful.
"""
import os
import logging
from datetime import datetime, timezone
from typing import List
from sqlmodel import Session, select

from lostfound.models.notification import Notification

logger = logging.getLogger(__name__)

OUTBOX_KEY = "outbox"


def enqueue(session: Session, recipient: str, subject: str, html: str) -> Notification:
    notification = Notification(recipient=recipient, subject=subject, html=html)
    session.add(notification)
    session.info.setdefault(OUTBOX_KEY, []).append(notification)
    return notification


def take_queued_ids(session: Session) -> List[int]:
    """Ids enqueued on this session since the last call; call after commit."""
    queued = session.info.pop(OUTBOX_KEY, [])
    return [notification.id for notification in queued if notification.id is not None]


def max_attempts() -> int:
    return int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "3"))


def _attempt(session: Session, notification: Notification, notifier) -> bool:
    notification.attempts += 1

    try:
        notifier.send(notification.recipient, notification.subject, notification.html)
    except Exception as e:
        logger.exception("Notification %s to %s failed", notification.id, notification.recipient)
        notification.status = "failed"
        notification.last_error = str(e)[:500]
        sent = False
    else:
        notification.status = "sent"
        notification.last_error = None
        notification.sent_at = datetime.now(timezone.utc)
        sent = True

    session.add(notification)
    session.commit()
    return sent


def deliver(bind, notifier, notification_ids: List[int]):
    with Session(bind) as session:
        for notification_id in notification_ids:
            notification = session.get(Notification, notification_id)
            if not notification or notification.status != "queued":
                continue
            _attempt(session, notification, notifier)


def retry_failed(session: Session, notifier, limit: int = None) -> dict:
    limit = limit or max_attempts()

    failed = session.exec(
        select(Notification)
        .where(Notification.status == "failed")
        .where(Notification.attempts < limit)
        .order_by(Notification.created_at)
    ).all()

    sent = sum(1 for notification in failed if _attempt(session, notification, notifier))

    logger.info("Retried %d notifications, %d sent", len(failed), sent)
    return {"retried": len(failed), "sent": sent}


def schedule_delivery(background_tasks, session: Session, notifier):
    ids = take_queued_ids(session)
    if ids:
        background_tasks.add_task(deliver, session.get_bind(), notifier, ids)
