from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.services.auth_service import get_user_from_token
from app.utils.exceptions import AuthError

# auto_error is off so a missing header goes through the AuthError envelope
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Resolve the bearer token to the calling user"""
    if credentials is None or not credentials.credentials:
        raise AuthError("Authorization token missing")

    return await get_user_from_token(credentials.credentials)


async def get_current_user_id(user: dict = Depends(get_current_user)) -> str:
    """Extract user ID from JWT token"""
    return user["id"]
