from typing import Dict, Iterable, Literal
from sqlmodel import Session, col, select

from lostfound.models.claim import Claim
from lostfound.models.reported_lost_found import ReportedLostFound
from lostfound.utils.errors import InvalidInput

ItemKind = Literal["found", "lost"]

RESOLVED = "Resolved"
PENDING = "Pending"


def _resolving_query(kind: str):
    # Approved claims settle found items, returned reports settle lost items
    if kind == "found":
        return select(Claim.found_item_id).where(Claim.status == "Approved"), Claim.found_item_id
    if kind == "lost":
        return (
            select(ReportedLostFound.lost_item_id).where(ReportedLostFound.status == "Returned"),
            ReportedLostFound.lost_item_id,
        )
    raise InvalidInput(f"Unknown item kind '{kind}'")


def resolve_display_status(session: Session, item_id: int, kind: ItemKind) -> str:
    query, item_column = _resolving_query(kind)
    hit = session.exec(query.where(item_column == item_id).limit(1)).first()
    return RESOLVED if hit is not None else PENDING


def resolve_display_statuses(session: Session, item_ids: Iterable[int], kind: ItemKind) -> Dict[int, str]:
    """Batched form of resolve_display_status: one query for a whole listing."""
    ids = set(item_ids)
    query, item_column = _resolving_query(kind)
    if not ids:
        return {}

    resolved = set(session.exec(query.where(col(item_column).in_(ids)).distinct()).all())

    return {item_id: RESOLVED if item_id in resolved else PENDING for item_id in ids}
