"""
Claim workflow: a user asserting that a posted found item is theirs.

The found item's poster (or an admin) moves a claim between Pending,
Approved and Rejected; every status change emails the claimant.
"""
import os
import logging
from datetime import datetime, timezone
from html import escape
from typing import List, Optional
from sqlmodel import Session, col, select

from lostfound.models.claim import CLAIM_STATUSES, Claim
from lostfound.models.found_item import FoundItem
from lostfound.models.user import User
from lostfound.services import notifications
from lostfound.services.items import contact_profile, describe_found_items, get_found_item
from lostfound.utils.errors import Conflict, Forbidden, InvalidInput, NotFound, NotFoundOrUnauthorized

logger = logging.getLogger(__name__)


def duplicate_claims_allowed() -> bool:
    return os.getenv("ALLOW_DUPLICATE_CLAIMS", "true").strip().lower() not in ("0", "false", "no")


def create_claim(
    session: Session,
    found_item_id: int,
    claiming_user_id: int,
    security_answer_attempt: Optional[str] = None,
    message: Optional[str] = None,
    allow_duplicates: Optional[bool] = None,
) -> Claim:
    if not found_item_id:
        raise InvalidInput("Missing required fields")

    found_item = get_found_item(session, found_item_id)

    if allow_duplicates is None:
        allow_duplicates = duplicate_claims_allowed()

    if not allow_duplicates:
        existing = session.exec(
            select(Claim)
            .where(Claim.found_item_id == found_item.id)
            .where(Claim.claiming_user_id == claiming_user_id)
            .where(Claim.status == "Pending")
        ).first()

        if existing:
            raise Conflict("Already a pending claim for this item exists")

    claim = Claim(
        found_item_id=found_item.id,
        claiming_user_id=claiming_user_id,
        security_answer_attempt=security_answer_attempt,
        message=message or None,
    )

    session.add(claim)
    session.commit()
    session.refresh(claim)

    logger.info("Claim %s filed on found item %s by user %s", claim.id, found_item.id, claiming_user_id)
    return claim


def _describe_claims(session: Session, rows) -> List[dict]:
    found_ids = {claim.found_item_id for claim, _ in rows}
    found_items = session.exec(select(FoundItem).where(col(FoundItem.id).in_(found_ids))).all() if found_ids else []
    snapshots = {item["id"]: item for item in describe_found_items(session, list(found_items))}

    return [
        {
            **claim.model_dump(),
            "user": contact_profile(claimant),
            "found_item": snapshots.get(claim.found_item_id),
        }
        for claim, claimant in rows
    ]


def _claims_query():
    return (
        select(Claim, User)
        .join(User, Claim.claiming_user_id == User.id)
        .order_by(Claim.created_at.desc(), Claim.id.desc())
    )


def list_claims_for_item(session: Session, found_item_id: int) -> List[dict]:
    rows = session.exec(_claims_query().where(Claim.found_item_id == found_item_id)).all()
    return _describe_claims(session, rows)


def list_claims_for_user(session: Session, user_id: int) -> List[dict]:
    rows = session.exec(_claims_query().where(Claim.claiming_user_id == user_id)).all()
    return _describe_claims(session, rows)


def get_claim(session: Session, claim_id: int) -> dict:
    row = session.exec(_claims_query().where(Claim.id == claim_id)).first()
    if not row:
        raise NotFound("Claim not found")

    return _describe_claims(session, [row])[0]


def _status_email(item: FoundItem, status: str):
    name = escape(item.name)

    html = (
        "<p>Dear user,</p>"
        f"<p>Your claim for the item <strong>{name}</strong> has been <strong>{status}</strong>.</p>"
    )

    if status == "Approved":
        html += f"<p>You can collect the item from: <strong>{escape(item.pickup_location)}</strong>.</p>"

    html += "<br><p>Regards,<br>Lost & Found Team</p>"

    subject = f'Your claim for "{item.name}" has been {status}'
    return subject, html


def update_claim_status(session: Session, claim_id: int, new_status: str, actor: User) -> Claim:
    """
    Move a claim to ``new_status`` and queue an email to the claimant.

    Any transition is allowed, including back to Pending, and repeating the
    current status sends the email again.
    """
    if new_status not in CLAIM_STATUSES:
        raise InvalidInput("Invalid claim status")

    claim = session.get(Claim, claim_id)
    if not claim:
        raise NotFound("Claim not found")

    found_item = get_found_item(session, claim.found_item_id)

    if actor.role != "admin" and found_item.posted_by != actor.id:
        raise Forbidden("Not authorized to update this claim")

    claim.status = new_status
    claim.decided_at = None if new_status == "Pending" else datetime.now(timezone.utc)
    session.add(claim)

    claimant = session.get(User, claim.claiming_user_id)
    if claimant and claimant.email:
        subject, html = _status_email(found_item, new_status)
        notifications.enqueue(session, claimant.email, subject, html)

    session.commit()
    session.refresh(claim)

    logger.info("Claim %s set to %s by user %s", claim.id, new_status, actor.id)
    return claim


def delete_claim(session: Session, claim_id: int, requesting_user_id: int):
    claim = session.exec(
        select(Claim)
        .where(Claim.id == claim_id)
        .where(Claim.claiming_user_id == requesting_user_id)
    ).first()

    if not claim:
        raise NotFoundOrUnauthorized("Claim not found or unauthorized")

    session.delete(claim)
    session.commit()

    logger.info("Claim %s deleted by user %s", claim_id, requesting_user_id)
