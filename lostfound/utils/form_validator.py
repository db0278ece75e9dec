from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lostfound.utils.security import check_secret_length

MAX_PHOTOS = 3


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class LostItemCreate(_Form):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    lost_date: datetime
    lost_location: str = Field(min_length=1, max_length=200)
    category_id: int
    photos: List[str] = Field(min_length=1, max_length=MAX_PHOTOS)


class LostItemUpdate(_Form):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    lost_date: Optional[datetime] = None
    lost_location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category_id: Optional[int] = None


class FoundItemCreate(_Form):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    found_date: datetime
    found_location: str = Field(min_length=1, max_length=200)
    pickup_location: str = Field(min_length=1, max_length=200)
    category_id: int
    security_question: Optional[str] = Field(default=None, max_length=200)
    security_answer: Optional[str] = Field(default=None, max_length=200)
    photos: List[str] = Field(min_length=1, max_length=MAX_PHOTOS)

    @field_validator("security_answer")
    @classmethod
    def answer_fits_hash(cls, value):
        return check_secret_length(value) if value else value


class FoundItemUpdate(_Form):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    found_date: Optional[datetime] = None
    found_location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category_id: Optional[int] = None


class PhotosUpdate(_Form):
    photos: List[str] = Field(min_length=1, max_length=MAX_PHOTOS)


class PickupLocationUpdate(_Form):
    pickup_location: str = Field(min_length=1, max_length=200)


class SecurityQAUpdate(_Form):
    security_question: str = Field(min_length=1, max_length=200)
    security_answer: str = Field(min_length=1, max_length=200)

    @field_validator("security_answer")
    @classmethod
    def answer_fits_hash(cls, value):
        return check_secret_length(value)


def changed_fields(payload: BaseModel) -> dict:
    # explicit nulls are ignored, fields are never cleared through an update
    return {field: value for field, value in payload.model_dump(exclude_unset=True).items() if value is not None}
