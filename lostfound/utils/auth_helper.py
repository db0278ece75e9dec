import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlmodel import Session

from lostfound.db.db import get_session
from lostfound.models.user import User

ALGORITHM = "HS256"
ACCESS_TOKEN_COOKIE = "accessToken"

bearer_scheme = HTTPBearer(auto_error=False)


def _secret_key() -> str:
    return os.getenv("JWT_SECRET", "your_really_long_secret_key")


def create_access_token(user: User) -> str:
    expire_days = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
    now = datetime.now(timezone.utc)

    jwt_payload = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=expire_days),
    }

    return jwt.encode(jwt_payload, _secret_key(), algorithm=ALGORITHM)


def get_current_user_optional(
    request: Request,
    token: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    raw = token.credentials if token else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not raw:
        return None

    try:
        return jwt.decode(raw, _secret_key(), algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_current_user_required(
    request: Request,
    token: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    raw = token.credentials if token else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not raw:
        raise HTTPException(status_code=401, detail="Unauthorized request")

    try:
        payload = jwt.decode(raw, _secret_key(), algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return payload


def get_db_user(session: Session, current_user) -> User:
    try:
        user_id = int(current_user["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found with given token")

    return user


def get_request_user(
    session: Session = Depends(get_session),
    current_user=Depends(get_current_user_required),
) -> User:
    return get_db_user(session, current_user)


def require_admin(user: User = Depends(get_request_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
