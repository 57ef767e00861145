import re
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from cineman.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha512"], deprecated="auto")

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", re.IGNORECASE)
TOKEN_ALPHABET = string.ascii_letters + string.digits

# Verified against when the email is unknown so failed logins cost the same
_DUMMY_HASH = pwd_context.hash(secrets.token_urlsafe(16))

def get_password_hash(password: str) -> str:
    """Hash a password with a per-hash salt"""
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against its hash"""
    if hashed_password is None:
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    return pwd_context.verify(plain_password, hashed_password)

def is_valid_password(password: str) -> bool:
    """Minimum length plus one uppercase, lowercase, digit and symbol"""
    return (
        len(password) >= settings.MIN_PASSWORD_LENGTH
        and any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
        and any(not c.isalnum() for c in password)
    )

def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email))

def generate_confirmation_token(length: int = 20) -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))

def _create_token(user_id: str, allow_login: bool, lifespan: timedelta, secret: str) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(user_id),
        "allowLogin": allow_login,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + lifespan,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)

def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Short-lived token accepted by protected endpoints"""
    lifespan = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(user_id, True, lifespan, settings.ACCESS_SECRET)

def create_refresh_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Long-lived token that can only mint access tokens"""
    lifespan = expires_delta or timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    return _create_token(user_id, False, lifespan, settings.REFRESH_SECRET)

def _decode_token(token: str, secret: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"require": ["exp", "sub", "iss", "aud"]},
        )
    except jwt.PyJWTError:
        return None
    return payload

def verify_access_token(token: str) -> Optional[dict]:
    return _decode_token(token, settings.ACCESS_SECRET)

def verify_refresh_token(token: str) -> Optional[dict]:
    return _decode_token(token, settings.REFRESH_SECRET)
