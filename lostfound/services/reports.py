"""
Report workflow: a finder telling a lost item's owner it may have turned up.
"""
import logging
from html import escape
from typing import List, Optional
from sqlmodel import Session, col, select

from lostfound.models.lost_item import LostItem
from lostfound.models.reported_lost_found import REPORT_STATUSES, ReportedLostFound
from lostfound.models.user import User
from lostfound.services import notifications
from lostfound.services.items import contact_profile, describe_lost_items, get_lost_item
from lostfound.utils.errors import Forbidden, InvalidInput, NotFound, NotFoundOrUnauthorized

logger = logging.getLogger(__name__)


def _found_email(owner: User, pickup_location: str, message: Optional[str]):
    html = (
        f"<p>Hi {escape(owner.name)},</p>"
        "<p>Good news! Someone has reported finding an item that matches what you lost.</p>"
        f"<p><strong>Pickup Location:</strong> {escape(pickup_location)}</p>"
        f"<p><strong>Message from Finder:</strong> {escape(message or 'No message provided')}</p>"
        "<p>Please log in to the Lost & Found portal to review and respond to the report.</p>"
        "<br/><p>Best regards,<br/>Lost & Found Help Desk</p>"
    )
    return "Someone Reported Finding Your Lost Item", html


def create_report(
    session: Session,
    lost_item_id: int,
    finder_user_id: int,
    message: Optional[str],
    pickup_location: str,
) -> ReportedLostFound:
    pickup_location = (pickup_location or "").strip()
    if not lost_item_id or not pickup_location:
        raise InvalidInput("lost_item_id and pickup_location are required.")

    lost_item = get_lost_item(session, lost_item_id)

    report = ReportedLostFound(
        lost_item_id=lost_item.id,
        user_who_found=finder_user_id,
        message=message or None,
        pickup_location=pickup_location,
    )
    session.add(report)

    owner = session.get(User, lost_item.posted_by)
    if owner and owner.email:
        subject, html = _found_email(owner, pickup_location, message)
        notifications.enqueue(session, owner.email, subject, html)

    session.commit()
    session.refresh(report)

    logger.info("Report %s filed on lost item %s by user %s", report.id, lost_item.id, finder_user_id)
    return report


def _describe_reports(session: Session, rows) -> List[dict]:
    lost_ids = {report.lost_item_id for report, _ in rows}
    lost_items = session.exec(select(LostItem).where(col(LostItem.id).in_(lost_ids))).all() if lost_ids else []
    snapshots = {item["id"]: item for item in describe_lost_items(session, list(lost_items))}

    return [
        {
            **report.model_dump(),
            "lost_item": snapshots.get(report.lost_item_id),
            "found_user": contact_profile(finder),
        }
        for report, finder in rows
    ]


def _reports_query():
    return (
        select(ReportedLostFound, User)
        .join(User, ReportedLostFound.user_who_found == User.id)
        .order_by(ReportedLostFound.created_at.desc(), ReportedLostFound.id.desc())
    )


def list_reports_filed(session: Session, finder_user_id: int) -> List[dict]:
    rows = session.exec(_reports_query().where(ReportedLostFound.user_who_found == finder_user_id)).all()
    return _describe_reports(session, rows)


def list_reports_received(session: Session, owner_user_id: int) -> List[dict]:
    rows = session.exec(
        _reports_query()
        .join(LostItem, ReportedLostFound.lost_item_id == LostItem.id)
        .where(LostItem.posted_by == owner_user_id)
    ).all()
    return _describe_reports(session, rows)


def list_reports_for_item(session: Session, lost_item_id: int) -> List[dict]:
    get_lost_item(session, lost_item_id)

    rows = session.exec(_reports_query().where(ReportedLostFound.lost_item_id == lost_item_id)).all()
    return _describe_reports(session, rows)


def update_report_status(session: Session, report_id: int, new_status: str, actor: User) -> ReportedLostFound:
    if new_status not in REPORT_STATUSES:
        raise InvalidInput("Invalid status. Use 'Pending' or 'Returned'.")

    report = session.get(ReportedLostFound, report_id)
    if not report:
        raise NotFound("Report not found")

    lost_item = get_lost_item(session, report.lost_item_id)

    if actor.role != "admin" and lost_item.posted_by != actor.id:
        raise Forbidden("Not authorized to update this report")

    report.status = new_status
    session.add(report)
    session.commit()
    session.refresh(report)

    logger.info("Report %s set to %s by user %s", report.id, new_status, actor.id)
    return report


def delete_report(session: Session, report_id: int, requesting_user_id: int):
    report = session.exec(
        select(ReportedLostFound)
        .where(ReportedLostFound.id == report_id)
        .where(ReportedLostFound.user_who_found == requesting_user_id)
    ).first()

    if not report:
        raise NotFoundOrUnauthorized("Report not found or you're not authorized to delete it.")

    session.delete(report)
    session.commit()

    logger.info("Report %s deleted by user %s", report_id, requesting_user_id)
