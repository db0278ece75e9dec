from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Notification(SQLModel, table=True):
    """Outgoing email, written in the same transaction as the change it reports."""

    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    recipient: str
    subject: str
    html: str

    status: str = Field(default="queued", index=True)  # values: "queued", "sent", "failed"
    attempts: int = Field(default=0)
    last_error: Optional[str] = None
    sent_at: Optional[datetime] = None
