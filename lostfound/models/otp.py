from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime


class OTPVerification(SQLModel, table=True):
    __tablename__ = "otp_verification"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True)
    otp_code: str
    expires_at: datetime
