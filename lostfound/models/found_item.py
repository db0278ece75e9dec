from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class FoundItem(SQLModel, table=True):
    __tablename__ = "found_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Finder info
    posted_by: int = Field(foreign_key="users.id", index=True)

    # Item fields
    name: str
    description: str
    found_date: datetime
    found_location: str
    pickup_location: str
    category_id: int = Field(foreign_key="categories.id")

    # Optional ownership check for claimants, answer stored as a bcrypt hash
    security_question: Optional[str] = Field(default=None)
    security_answer_hash: Optional[str] = Field(default=None)


class FoundItemPhoto(SQLModel, table=True):
    __tablename__ = "found_item_photos"

    id: Optional[int] = Field(default=None, primary_key=True)
    found_item_id: int = Field(foreign_key="found_items.id", index=True)
    url: str
