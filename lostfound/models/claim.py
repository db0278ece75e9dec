from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone

CLAIM_STATUSES = ("Pending", "Approved", "Rejected")


class Claim(SQLModel, table=True):
    __tablename__ = "claims"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    found_item_id: int = Field(foreign_key="found_items.id", index=True)
    claiming_user_id: int = Field(foreign_key="users.id", index=True)

    # Content
    security_answer_attempt: Optional[str] = None
    message: Optional[str] = None

    status: str = Field(default="Pending", index=True)  # values: "Pending", "Approved", "Rejected"
    decided_at: Optional[datetime] = None
