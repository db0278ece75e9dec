import secrets
from datetime import datetime, timezone
import bcrypt

from lostfound.utils.errors import InvalidInput

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_SECRET_BYTES = 72


def check_secret_length(plain: str) -> str:
    if len(plain.encode("utf-8")) > MAX_SECRET_BYTES:
        raise ValueError(f"must be at most {MAX_SECRET_BYTES} bytes")
    return plain


def hash_secret(plain: str) -> str:
    if len(plain.encode("utf-8")) > MAX_SECRET_BYTES:
        raise InvalidInput(f"Secret must be at most {MAX_SECRET_BYTES} bytes")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_secret(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    if len(plain.encode("utf-8")) > MAX_SECRET_BYTES:
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
