# Database models
from app.models.user import User
from app.models.listing import Listing

__all__ = [
    "User",
    "Listing",
]
