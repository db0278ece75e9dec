from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select, func

from lostfound.db.db import get_session
from lostfound.models.found_item import FoundItem
from lostfound.models.lost_item import LostItem
from lostfound.models.user import User
from lostfound.utils.auth_helper import get_request_user


router = APIRouter()


class PhoneUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    phone_number: str = Field(min_length=1, max_length=20)


class HostelRoomUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    hostel: str = Field(min_length=1, max_length=50)
    room_number: str = Field(min_length=1, max_length=20)


class ProfilePicUpdate(BaseModel):
    profile_pic: str = Field(min_length=1)


@router.get("/me")
async def get_my_profile(user: User = Depends(get_request_user)):
    return {
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone_number,
            "roll_number": user.roll_number,
            "hostel": user.hostel,
            "room_number": user.room_number,
            "profile_pic": user.profile_pic,
            "email_verified": user.email_verified,
        }
    }


@router.patch("/update-phone")
def update_phone_number(
    payload: PhoneUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    user.phone_number = payload.phone_number

    session.add(user)
    session.commit()

    return {"message": "Phone number updated"}


@router.patch("/update-hostel-room")
def update_hostel_and_room(
    payload: HostelRoomUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    user.hostel = payload.hostel
    user.room_number = payload.room_number

    session.add(user)
    session.commit()

    return {"message": "Hostel and room number updated"}


@router.patch("/update-profile-pic")
def update_profile_pic(
    payload: ProfilePicUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    user.profile_pic = payload.profile_pic

    session.add(user)
    session.commit()
    session.refresh(user)

    return {"message": "Profile picture updated", "profile_pic": user.profile_pic}


@router.get("/getDashboardCounts")
def get_dashboard_counts(
    session: Session = Depends(get_session),
    user: User = Depends(get_request_user),
):
    return {
        "lost_items": session.exec(select(func.count(LostItem.id))).one(),
        "found_items": session.exec(select(func.count(FoundItem.id))).one(),
        "users": session.exec(select(func.count(User.id))).one(),
    }
