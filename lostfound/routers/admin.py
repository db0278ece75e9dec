from typing import List, Literal, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session, select, func, and_

from lostfound.db.db import get_session
from lostfound.models.claim import Claim
from lostfound.models.found_item import FoundItem
from lostfound.models.lost_item import LostItem
from lostfound.models.notification import Notification
from lostfound.models.reported_lost_found import ReportedLostFound
from lostfound.models.user import User
from lostfound.services import notifications
from lostfound.utils.auth_helper import require_admin
from lostfound.utils.mailer import get_notifier

router = APIRouter()


# Response Models
class OverviewStats(BaseModel):
    lost_items: int
    found_items: int
    users: int
    items_current_month: int
    claims_pending: int
    claims_approved_current_month: int
    reports_pending: int
    reports_returned: int
    notifications_failed: int


class NotificationDetail(BaseModel):
    id: int
    recipient: str
    subject: str
    status: str
    attempts: int
    last_error: Optional[str]
    created_at: datetime
    sent_at: Optional[datetime]


class RetryResult(BaseModel):
    retried: int
    sent: int


def _count(session: Session, column, *conditions) -> int:
    query = select(func.count(column))
    if conditions:
        query = query.where(and_(*conditions))
    return session.exec(query).one()


@router.get("/stats", response_model=OverviewStats)
def get_overview_stats(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    """Get overview statistics for the admin dashboard"""
    now = datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    return OverviewStats(
        lost_items=_count(session, LostItem.id),
        found_items=_count(session, FoundItem.id),
        users=_count(session, User.id),
        items_current_month=(
            _count(session, LostItem.id, LostItem.created_at >= month_start)
            + _count(session, FoundItem.id, FoundItem.created_at >= month_start)
        ),
        claims_pending=_count(session, Claim.id, Claim.status == "Pending"),
        claims_approved_current_month=_count(
            session, Claim.id, Claim.status == "Approved", Claim.decided_at >= month_start
        ),
        reports_pending=_count(session, ReportedLostFound.id, ReportedLostFound.status == "Pending"),
        reports_returned=_count(session, ReportedLostFound.id, ReportedLostFound.status == "Returned"),
        notifications_failed=_count(session, Notification.id, Notification.status == "failed"),
    )


@router.get("/notifications", response_model=List[NotificationDetail])
def get_notifications(
    status: Optional[Literal["queued", "sent", "failed"]] = None,
    limit: int = Query(50, ge=1, le=200),
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """Inspect the email outbox"""
    query = select(Notification)

    if status:
        query = query.where(Notification.status == status)

    query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    return session.exec(query).all()


@router.post("/notifications/retry", response_model=RetryResult)
def retry_notifications(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
    notifier=Depends(get_notifier),
):
    """Resend failed emails that are still under the attempt limit"""
    return notifications.retry_failed(session, notifier)
