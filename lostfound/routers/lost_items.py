from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from lostfound.db.db import get_session
from lostfound.models.lost_item import LostItem
from lostfound.models.user import User
from lostfound.services.items import (
    delete_lost_item,
    describe_lost_items,
    get_lost_item,
    replace_photos,
    require_category,
)
from lostfound.utils.auth_helper import get_request_user
from lostfound.utils.errors import NotFoundOrUnauthorized
from lostfound.utils.form_validator import LostItemCreate, LostItemUpdate, PhotosUpdate, changed_fields

router = APIRouter()


def _owned_item(session: Session, item_id: int, user: User) -> LostItem:
    item = session.get(LostItem, item_id)
    if not item or item.posted_by != user.id:
        raise NotFoundOrUnauthorized("Item not found or unauthorized")
    return item


@router.post("/report", status_code=201)
def report_lost_item(
    payload: LostItemCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    require_category(session, payload.category_id)

    db_item = LostItem(
        posted_by=user.id,
        name=payload.name,
        description=payload.description,
        lost_date=payload.lost_date,
        lost_location=payload.lost_location,
        category_id=payload.category_id,
    )

    session.add(db_item)
    session.flush()

    replace_photos(session, db_item.id, "lost", payload.photos)

    session.commit()
    session.refresh(db_item)

    return {"message": "Lost item reported successfully", "lost_item_id": db_item.id}


@router.get("/")
def get_all_lost_items(session: Session = Depends(get_session)):
    items = session.exec(
        select(LostItem).order_by(LostItem.lost_date.desc(), LostItem.id.desc())
    ).all()

    return {"items": describe_lost_items(session, list(items))}


@router.get("/user/me")
def get_my_lost_items(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    items = session.exec(
        select(LostItem)
        .where(LostItem.posted_by == user.id)
        .order_by(LostItem.lost_date.desc(), LostItem.id.desc())
    ).all()

    return {"items": describe_lost_items(session, list(items))}


@router.get("/{item_id}")
def get_lost_item_by_id(item_id: int, session: Session = Depends(get_session)):
    item = get_lost_item(session, item_id)
    return {"item": describe_lost_items(session, [item])[0]}


@router.put("/update/{item_id}")
def update_lost_item_details(
    item_id: int,
    payload: LostItemUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    item = _owned_item(session, item_id, user)
    updates = changed_fields(payload)

    if "category_id" in updates:
        require_category(session, updates["category_id"])

    for field, value in updates.items():
        setattr(item, field, value)

    session.add(item)
    session.commit()

    return {"message": "Lost item details updated successfully"}


@router.put("/update-images/{item_id}")
def update_lost_item_images(
    item_id: int,
    payload: PhotosUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    item = _owned_item(session, item_id, user)

    replace_photos(session, item.id, "lost", payload.photos)
    session.commit()

    return {"message": "Lost item images updated successfully"}


@router.delete("/{item_id}")
def remove_lost_item(
    item_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    delete_lost_item(session, item_id, user.id)
    return {"message": "Lost item deleted successfully"}
