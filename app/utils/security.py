"""
Security helpers - password/OTP hashing and JWT handling
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "reset"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def generate_otp() -> str:
    """Six-digit numeric one-time code"""
    return str(secrets.randbelow(900000) + 100000)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    to_encode.setdefault("type", ACCESS_TOKEN_TYPE)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_reset_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(
        data={"email": email, "type": RESET_TOKEN_TYPE},
        expires_delta=expires_delta or timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_access_token(token: str) -> Optional[dict]:
    """Decode a JWT, returning None when the signature or expiry check fails"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
