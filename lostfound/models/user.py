from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    roll_number: str = Field(index=True, unique=True)
    phone_number: str
    hostel: str
    room_number: str
    profile_pic: Optional[str] = Field(default=None)

    email_verified: bool = Field(default=False)
    role: str = Field(default="user")  # Possible roles: user, admin
