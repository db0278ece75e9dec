from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class LostItem(SQLModel, table=True):
    __tablename__ = "lost_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Owner info
    posted_by: int = Field(foreign_key="users.id", index=True)

    # Item fields
    name: str
    description: str
    lost_date: datetime
    lost_location: str
    category_id: int = Field(foreign_key="categories.id")


class LostItemPhoto(SQLModel, table=True):
    __tablename__ = "lost_item_photos"

    id: Optional[int] = Field(default=None, primary_key=True)
    lost_item_id: int = Field(foreign_key="lost_items.id", index=True)
    url: str
