from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from lostfound.db.db import get_session
from lostfound.models.found_item import FoundItem
from lostfound.models.user import User
from lostfound.services.items import (
    delete_found_item,
    describe_found_items,
    get_found_item,
    replace_photos,
    require_category,
)
from lostfound.utils.auth_helper import get_request_user
from lostfound.utils.errors import NotFoundOrUnauthorized
from lostfound.utils.form_validator import (
    FoundItemCreate,
    FoundItemUpdate,
    PhotosUpdate,
    PickupLocationUpdate,
    SecurityQAUpdate,
    changed_fields,
)
from lostfound.utils.security import hash_secret

router = APIRouter()


def _owned_item(session: Session, item_id: int, user: User) -> FoundItem:
    item = session.get(FoundItem, item_id)
    if not item or item.posted_by != user.id:
        raise NotFoundOrUnauthorized("Item not found or unauthorized")
    return item


@router.post("/report", status_code=201)
def report_found_item(
    payload: FoundItemCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    require_category(session, payload.category_id)

    db_item = FoundItem(
        posted_by=user.id,
        name=payload.name,
        description=payload.description,
        found_date=payload.found_date,
        found_location=payload.found_location,
        pickup_location=payload.pickup_location,
        category_id=payload.category_id,
        security_question=payload.security_question or None,
        security_answer_hash=hash_secret(payload.security_answer) if payload.security_answer else None,
    )

    session.add(db_item)
    session.flush()

    replace_photos(session, db_item.id, "found", payload.photos)

    session.commit()
    session.refresh(db_item)

    return {"message": "Found item reported successfully", "found_item_id": db_item.id}


@router.get("/")
def get_all_found_items(session: Session = Depends(get_session)):
    items = session.exec(
        select(FoundItem).order_by(FoundItem.found_date.desc(), FoundItem.id.desc())
    ).all()

    return {"items": describe_found_items(session, list(items))}


@router.get("/mine")
def get_my_found_items(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    items = session.exec(
        select(FoundItem)
        .where(FoundItem.posted_by == user.id)
        .order_by(FoundItem.found_date.desc(), FoundItem.id.desc())
    ).all()

    return {"items": describe_found_items(session, list(items))}


@router.get("/{item_id}")
def get_found_item_by_id(item_id: int, session: Session = Depends(get_session)):
    item = get_found_item(session, item_id)
    return {"item": describe_found_items(session, [item])[0]}


@router.put("/updateDetails/{item_id}")
def update_found_item_details(
    item_id: int,
    payload: FoundItemUpdate,
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

    return {"message": "Found item details updated successfully"}


@router.put("/updateImages/{item_id}")
def update_found_item_images(
    item_id: int,
    payload: PhotosUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    item = _owned_item(session, item_id, user)

    replace_photos(session, item.id, "found", payload.photos)
    session.commit()

    return {"message": "Images updated successfully"}


@router.put("/updatePickupLocation/{item_id}")
def update_pickup_location(
    item_id: int,
    payload: PickupLocationUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    item = _owned_item(session, item_id, user)

    item.pickup_location = payload.pickup_location
    session.add(item)
    session.commit()

    return {"message": "Pickup location updated successfully"}


@router.put("/updateSecurityQA/{item_id}")
def update_security_qa(
    item_id: int,
    payload: SecurityQAUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    item = _owned_item(session, item_id, user)

    item.security_question = payload.security_question
    item.security_answer_hash = hash_secret(payload.security_answer)
    session.add(item)
    session.commit()

    return {"message": "Security question and answer updated successfully"}


@router.delete("/{item_id}")
def remove_found_item(
    item_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    delete_found_item(session, item_id, user.id)
    return {"message": "Item and its photos deleted successfully"}
