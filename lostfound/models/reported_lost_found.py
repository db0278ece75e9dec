from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone

REPORT_STATUSES = ("Pending", "Returned")


class ReportedLostFound(SQLModel, table=True):
    __tablename__ = "reported_lost_found"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    lost_item_id: int = Field(foreign_key="lost_items.id", index=True)
    user_who_found: int = Field(foreign_key="users.id", index=True)

    message: Optional[str] = None
    pickup_location: str

    status: str = Field(default="Pending", index=True)  # values: "Pending", "Returned"
