"""
Lost and found item registries.

Lookups, photo lists and the enriched dictionaries that list/detail responses
and the claim/report workflow share. Every listing goes through the batched
helpers so a page of items costs a fixed number of queries.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional
from sqlmodel import Session, col, select

from lostfound.models.category import Category
from lostfound.models.claim import Claim
from lostfound.models.found_item import FoundItem, FoundItemPhoto
from lostfound.models.lost_item import LostItem, LostItemPhoto
from lostfound.models.reported_lost_found import ReportedLostFound
from lostfound.models.user import User
from lostfound.services.item_status import ItemKind, resolve_display_statuses
from lostfound.utils.errors import InvalidInput, NotFound, NotFoundOrUnauthorized

logger = logging.getLogger(__name__)


def contact_profile(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None

    return {
        "id": user.id,
        "name": user.name,
        "roll_number": user.roll_number,
        "phone_number": user.phone_number,
        "hostel": user.hostel,
        "room_number": user.room_number,
    }


def get_lost_item(session: Session, item_id: int) -> LostItem:
    item = session.get(LostItem, item_id)
    if not item:
        raise NotFound("Lost item not found")
    return item


def get_found_item(session: Session, item_id: int) -> FoundItem:
    item = session.get(FoundItem, item_id)
    if not item:
        raise NotFound("Found item not found")
    return item


def require_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise InvalidInput("Invalid category")
    return category


def _photo_model(kind: ItemKind):
    if kind == "found":
        return FoundItemPhoto, FoundItemPhoto.found_item_id
    if kind == "lost":
        return LostItemPhoto, LostItemPhoto.lost_item_id
    raise InvalidInput(f"Unknown item kind '{kind}'")


def list_photos(session: Session, item_id: int, kind: ItemKind) -> List[str]:
    model, item_column = _photo_model(kind)
    photos = session.exec(select(model).where(item_column == item_id).order_by(model.id)).all()
    return [photo.url for photo in photos]


def photo_map(session: Session, item_ids: Iterable[int], kind: ItemKind) -> Dict[int, List[str]]:
    ids = set(item_ids)
    model, item_column = _photo_model(kind)
    urls = defaultdict(list)
    if not ids:
        return urls

    photos = session.exec(select(model).where(col(item_column).in_(ids)).order_by(model.id)).all()
    for photo in photos:
        urls[getattr(photo, item_column.key)].append(photo.url)

    return urls


def replace_photos(session: Session, item_id: int, kind: ItemKind, urls: List[str]):
    """Swap an item's photo set; caller commits."""
    model, item_column = _photo_model(kind)

    for photo in session.exec(select(model).where(item_column == item_id)).all():
        session.delete(photo)

    for url in urls:
        session.add(model(**{item_column.key: item_id, "url": url}))


def _users_by_id(session: Session, user_ids: Iterable[int]) -> Dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    return {user.id: user for user in session.exec(select(User).where(col(User.id).in_(ids))).all()}


def _category_names(session: Session, category_ids: Iterable[int]) -> Dict[int, str]:
    ids = set(category_ids)
    if not ids:
        return {}
    categories = session.exec(select(Category).where(col(Category.id).in_(ids))).all()
    return {category.id: category.name for category in categories}


def _describe(session: Session, items: list, kind: ItemKind, exclude: set) -> List[dict]:
    ids = [item.id for item in items]
    photos = photo_map(session, ids, kind)
    statuses = resolve_display_statuses(session, ids, kind)
    posters = _users_by_id(session, (item.posted_by for item in items))
    categories = _category_names(session, (item.category_id for item in items))

    described = []
    for item in items:
        data = item.model_dump(exclude=exclude)
        data["category_name"] = categories.get(item.category_id)
        data["photos"] = photos.get(item.id, [])
        data["status"] = statuses[item.id]
        data["user"] = contact_profile(posters.get(item.posted_by))
        described.append(data)

    return described


def describe_lost_items(session: Session, items: List[LostItem]) -> List[dict]:
    return _describe(session, items, "lost", exclude=set())


def describe_found_items(session: Session, items: List[FoundItem]) -> List[dict]:
    # the answer hash never leaves the server
    return _describe(session, items, "found", exclude={"security_answer_hash"})


def delete_lost_item(session: Session, item_id: int, user_id: int):
    item = session.exec(
        select(LostItem).where(LostItem.id == item_id).where(LostItem.posted_by == user_id)
    ).first()

    if not item:
        raise NotFoundOrUnauthorized("Item not found or unauthorized")

    # Delete dependents first, one transaction for the lot
    for report in session.exec(select(ReportedLostFound).where(ReportedLostFound.lost_item_id == item.id)).all():
        session.delete(report)

    for photo in session.exec(select(LostItemPhoto).where(LostItemPhoto.lost_item_id == item.id)).all():
        session.delete(photo)

    session.flush()
    session.delete(item)
    session.commit()

    logger.info("Lost item %s deleted by user %s", item_id, user_id)


def delete_found_item(session: Session, item_id: int, user_id: int):
    item = session.exec(
        select(FoundItem).where(FoundItem.id == item_id).where(FoundItem.posted_by == user_id)
    ).first()

    if not item:
        raise NotFoundOrUnauthorized("Item not found or unauthorized")

    for claim in session.exec(select(Claim).where(Claim.found_item_id == item.id)).all():
        session.delete(claim)

    for photo in session.exec(select(FoundItemPhoto).where(FoundItemPhoto.found_item_id == item.id)).all():
        session.delete(photo)

    session.flush()
    session.delete(item)
    session.commit()

    logger.info("Found item %s deleted by user %s", item_id, user_id)
