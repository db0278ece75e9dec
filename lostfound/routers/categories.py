from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from lostfound.db.db import get_session
from lostfound.models.category import Category
from lostfound.models.found_item import FoundItem
from lostfound.models.lost_item import LostItem
from lostfound.models.user import User
from lostfound.utils.auth_helper import require_admin
from lostfound.utils.errors import Conflict, NotFound

router = APIRouter()


class CategoryRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None


def _get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise NotFound("Category not found")
    return category


def _ensure_unique_name(session: Session, name: str, category_id: Optional[int] = None):
    existing = session.exec(select(Category).where(Category.name == name)).first()
    if existing and existing.id != category_id:
        raise Conflict("Category already exists")


@router.post("/categories", status_code=201)
def create_category(
    payload: CategoryRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    _ensure_unique_name(session, payload.name)

    category = Category(name=payload.name, description=payload.description or None)
    session.add(category)
    session.commit()
    session.refresh(category)

    return {"message": "Category created successfully", "category": category}


@router.get("/categories")
def get_all_categories(session: Session = Depends(get_session)):
    categories = session.exec(select(Category).order_by(Category.name)).all()
    return {"categories": categories}


@router.get("/categories/{category_id}")
def get_category_by_id(category_id: int, session: Session = Depends(get_session)):
    return {"category": _get_category(session, category_id)}


@router.patch("/categories/{category_id}")
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    category = _get_category(session, category_id)

    if payload.name:
        _ensure_unique_name(session, payload.name, category.id)
        category.name = payload.name
    if payload.description:
        category.description = payload.description

    session.add(category)
    session.commit()

    return {"message": "Category updated successfully"}


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    category = _get_category(session, category_id)

    in_use = (
        session.exec(select(LostItem.id).where(LostItem.category_id == category.id).limit(1)).first()
        or session.exec(select(FoundItem.id).where(FoundItem.category_id == category.id).limit(1)).first()
    )
    if in_use:
        raise Conflict("Category is still used by items")

    session.delete(category)
    session.commit()

    return {"message": "Category deleted successfully"}
