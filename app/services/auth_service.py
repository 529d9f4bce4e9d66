"""
Auth Service - signup, login, bearer tokens and OTP-gated password reset
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import re
import uuid

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.database.connection import AsyncSessionLocal
from app.models.user import User
from app.services.email_service import send_otp_email
from app.utils.exceptions import (
    AuthError,
    ConflictError,
    ExpiredError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.utils.security import (
    ACCESS_TOKEN_TYPE,
    RESET_TOKEN_TYPE,
    create_access_token,
    create_reset_token,
    decode_access_token,
    generate_otp,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)

# No nested quantifiers: matching must stay linear on hostile input
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[A-Za-z]{2,}$")
MAX_EMAIL_LENGTH = 254
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
MIN_PASSWORD_LENGTH = 6
ROLES = ("buyer", "seller")


def _user_to_dict(user: User) -> dict:
    """Public projection of a user; never includes the password or OTP hash"""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
    }


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def _find_conflicting_user(session, email: str, phone: str) -> Optional[User]:
    stmt = select(User).where(or_(User.email == email, User.phone == phone))
    result = await session.execute(stmt)
    return result.scalars().first()


def validate_signup(
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
    role: Optional[str],
) -> None:
    """Raise ValidationError for the first signup rule that fails"""
    fields = [name, email, phone, password, confirm_password, role]
    if any(value is None or not str(value).strip() for value in fields):
        raise ValidationError("All fields are required")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if password != confirm_password:
        raise ValidationError("Passwords do not match")

    email = email.strip()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address")

    if not PHONE_PATTERN.match(phone.strip()):
        raise ValidationError("Please enter a valid 10-digit phone number")

    if role not in ROLES:
        raise ValidationError("Role must be either buyer or seller")


async def register_user(
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
    role: Optional[str],
) -> dict:
    """Register a new user and return its public projection"""
    validate_signup(name, email, phone, password, confirm_password, role)
    email = _normalize_email(email)
    phone = phone.strip()

    async with AsyncSessionLocal() as session:
        if await _find_conflicting_user(session, email, phone):
            raise ConflictError("User already exists, you can log in")

        new_user = User(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email,
            phone=phone,
            hashed_password=get_password_hash(password),
            role=role,
        )

        session.add(new_user)
        try:
            await session.commit()
        except IntegrityError:
            # A concurrent signup took the email or phone after the check above
            await session.rollback()
            logger.warning("Signup hit the unique constraint on email or phone")
            raise ConflictError("User already exists, you can log in")
        await session.refresh(new_user)

        logger.info(f"User registered: {new_user.id} ({role})")
        return _user_to_dict(new_user)


async def login_user(email: Optional[str], password: Optional[str]) -> dict:
    """Verify credentials and issue a 24h bearer token"""
    if not email or not password:
        raise ValidationError("Email and password are required")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == _normalize_email(email))
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError("User not found")

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for user {user.id}")
            raise AuthError("Invalid password")

        token = create_access_token(
            data={"sub": user.id, "email": user.email, "type": ACCESS_TOKEN_TYPE},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
        return {"token": token, "user": _user_to_dict(user)}


async def get_user_by_id(user_id: str) -> Optional[dict]:
    """Get user by ID"""
    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            return None

        return _user_to_dict(user)


async def get_user_from_token(token: str) -> dict:
    """Resolve an access token to the user it was issued for"""
    payload = decode_access_token(token)
    if payload is None:
        raise AuthError("Invalid or expired token")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise AuthError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token")

    user = await get_user_by_id(user_id)
    if not user:
        raise AuthError("User not found")

    return user


async def request_password_reset(email: Optional[str]) -> None:
    """Issue a fresh one-time code, replacing any pending one, and email it"""
    if not email:
        raise ValidationError("Email is required")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == _normalize_email(email))
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError("User not found")

        otp = generate_otp()
        user.otp_hash = get_password_hash(otp)
        user.otp_expires = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        await session.commit()

        delivered = await send_otp_email(user.email, otp)
        if not delivered:
            raise InternalError("Failed to send OTP")

        logger.info(f"Password reset OTP issued for user {user.id}")


async def verify_reset_otp(email: Optional[str], otp: Optional[str]) -> str:
    """Check the pending code and return a short-lived reset token"""
    if not email or not otp:
        raise ValidationError("Email and OTP are required")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == _normalize_email(email))
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user or not user.otp_hash or not user.otp_expires:
            raise ExpiredError("Invalid or expired OTP")

        if _as_utc(user.otp_expires) < datetime.now(timezone.utc):
            raise ExpiredError("Invalid or expired OTP")

        if not verify_password(otp, user.otp_hash):
            raise ValidationError("Invalid OTP")

        return create_reset_token(user.email)


async def reset_password(
    email: Optional[str],
    reset_token: Optional[str],
    new_password: Optional[str],
) -> None:
    """Store a new password hash and clear the pending code in one commit"""
    if not email or not reset_token or not new_password:
        raise ValidationError("Missing required fields")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    payload = decode_access_token(reset_token)
    if payload is None or payload.get("type") != RESET_TOKEN_TYPE:
        raise AuthError("Invalid or expired token")

    email = _normalize_email(email)
    if payload.get("email") != email:
        raise AuthError("Invalid token")

    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError("User not found")

        # A completed reset clears the code, so the same reset token cannot be replayed
        if not user.otp_hash:
            raise AuthError("No pending password reset")

        user.hashed_password = get_password_hash(new_password)
        user.otp_hash = None
        user.otp_expires = None
        await session.commit()

        logger.info(f"Password reset completed for user {user.id}")
