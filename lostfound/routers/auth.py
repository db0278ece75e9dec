import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Response
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlmodel import Session, or_, select

from lostfound.db.db import get_session
from lostfound.models.otp import OTPVerification
from lostfound.models.user import User
from lostfound.services import notifications
from lostfound.utils.auth_helper import ACCESS_TOKEN_COOKIE, create_access_token
from lostfound.utils.errors import Conflict, InvalidInput, NotFound, Unauthorized
from lostfound.utils.mailer import get_notifier
from lostfound.utils.security import as_utc, check_secret_length, generate_otp, hash_secret, verify_secret

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    roll_number: str = Field(min_length=1, max_length=30)
    phone: str = Field(min_length=1, max_length=20)
    hostel: str = Field(min_length=1, max_length=50)
    room_number: str = Field(min_length=1, max_length=20)
    profile_pic: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_fits_hash(cls, value):
        return check_secret_length(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    email: EmailStr


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    otp: str


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    new_password: str = Field(min_length=6, max_length=128)

    @field_validator("new_password")
    @classmethod
    def password_fits_hash(cls, value):
        return check_secret_length(value)


def _issue_otp(session: Session, email: str, subject: str, html: str):
    otp = generate_otp()
    minutes = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))

    session.add(OTPVerification(
        email=email,
        otp_code=otp,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=minutes),
    ))
    notifications.enqueue(session, email, subject, html.format(otp=otp, minutes=minutes))


def _consume_otp(session: Session, email: str, otp: str):
    # newest code wins, older ones are superseded
    record = session.exec(
        select(OTPVerification)
        .where(OTPVerification.email == email)
        .order_by(OTPVerification.expires_at.desc(), OTPVerification.id.desc())
    ).first()

    if not record or record.otp_code != otp or as_utc(record.expires_at) < datetime.now(timezone.utc):
        raise InvalidInput("Invalid or expired OTP")

    for used in session.exec(select(OTPVerification).where(OTPVerification.email == email)).all():
        session.delete(used)


@router.post("/register", status_code=201)
def register_user(
    payload: RegisterRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    notifier=Depends(get_notifier),
):
    existing = session.exec(
        select(User).where(or_(User.email == payload.email, User.roll_number == payload.roll_number))
    ).first()

    if existing:
        raise Conflict("User already exists with that email or roll number")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_secret(payload.password),
        roll_number=payload.roll_number,
        phone_number=payload.phone,
        hostel=payload.hostel,
        room_number=payload.room_number,
        profile_pic=payload.profile_pic,
    )
    session.add(user)

    _issue_otp(
        session,
        payload.email,
        "Verify your email - Lost & Found",
        "<p>Your OTP is: <strong>{otp}</strong>. It is valid for {minutes} minutes.</p>",
    )

    session.commit()
    notifications.schedule_delivery(background_tasks, session, notifier)

    logger.info("Registered user %s", user.id)
    return {"message": "User registered. Please verify your email."}


@router.post("/login")
def login(payload: LoginRequest, response: Response, session: Session = Depends(get_session)):
    if not payload.email or not payload.password:
        raise InvalidInput("Email and password are required")

    user = session.exec(select(User).where(User.email == payload.email)).first()

    if not user or not verify_secret(payload.password, user.password_hash):
        raise Unauthorized("Invalid credentials")

    token = create_access_token(user)
    expire_days = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        httponly=True,
        secure=os.getenv("ENVIRONMENT") == "production",
        samesite="strict",
        max_age=expire_days * 24 * 60 * 60,
    )

    return {
        "message": "Login successful",
        "token": token,
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "roll_number": user.roll_number,
            "hostel": user.hostel,
            "room_number": user.room_number,
        },
    }


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return {"message": "Logout successful"}


@router.post("/verify-email")
def verify_email(payload: VerifyEmailRequest, session: Session = Depends(get_session)):
    _consume_otp(session, payload.email, payload.otp)

    user = session.exec(select(User).where(User.email == payload.email)).first()
    if user:
        user.email_verified = True
        session.add(user)

    session.commit()
    return {"message": "Email verified successfully"}


@router.post("/forgot-password")
def forgot_password(
    payload: EmailRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    notifier=Depends(get_notifier),
):
    user = session.exec(select(User).where(User.email == payload.email)).first()
    if not user:
        raise NotFound("User not found with this email")

    _issue_otp(
        session,
        payload.email,
        "Password Reset OTP - Lost & Found",
        "<p>Your OTP for password reset is: <strong>{otp}</strong>. It expires in {minutes} minutes.</p>",
    )

    session.commit()
    notifications.schedule_delivery(background_tasks, session, notifier)

    return {"message": "OTP sent to email for password reset"}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, session: Session = Depends(get_session)):
    _consume_otp(session, payload.email, payload.otp)

    user = session.exec(select(User).where(User.email == payload.email)).first()
    if not user:
        raise NotFound("User not found with this email")

    user.password_hash = hash_secret(payload.new_password)
    session.add(user)
    session.commit()

    return {"message": "Password reset successful"}
