"""
Listing Service - CRUD over property listings with owner-only mutation
"""
from typing import Dict, List
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, desc

from app.database.connection import AsyncSessionLocal
from app.models.listing import Listing
from app.schemas.listing import ListingCreateRequest
from app.utils.exceptions import AuthError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

LISTING_FIELDS = (
    "name",
    "address",
    "description",
    "type",
    "bedrooms",
    "bathrooms",
    "regular_price",
    "discount_price",
    "parking",
    "furnished",
    "offer",
    "images",
)


def _listing_to_dict(listing: Listing) -> Dict:
    return {
        "id": listing.id,
        "owner_id": listing.owner_id,
        "name": listing.name,
        "address": listing.address,
        "description": listing.description,
        "type": listing.type,
        "bedrooms": listing.bedrooms,
        "bathrooms": listing.bathrooms,
        "regular_price": listing.regular_price,
        "discount_price": listing.discount_price,
        "parking": listing.parking,
        "furnished": listing.furnished,
        "offer": listing.offer,
        "images": list(listing.images or []),
        "created_at": listing.created_at.isoformat() if listing.created_at else "",
        "updated_at": listing.updated_at.isoformat() if listing.updated_at else "",
    }


def _validate_listing_fields(fields: Dict) -> Dict:
    """Run the listing schema over a full set of fields"""
    try:
        validated = ListingCreateRequest.model_validate(fields)
    except PydanticValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in e.errors()
        ]
        raise ValidationError("Validation failed", errors=errors)
    return validated.model_dump()


async def _get_owned_listing(session, listing_id: str, caller_id: str) -> Listing:
    stmt = select(Listing).where(Listing.id == listing_id)
    result = await session.execute(stmt)
    listing = result.scalar_one_or_none()

    if not listing:
        raise NotFoundError("Listing not found")

    if listing.owner_id != caller_id:
        logger.warning(f"User {caller_id} tried to modify listing {listing_id} owned by {listing.owner_id}")
        raise AuthError("You can only modify your own listings")

    return listing


async def create_listing(owner_id: str, listing_data: Dict) -> Dict:
    """Create a new listing owned by the caller"""
    fields = _validate_listing_fields(listing_data)

    async with AsyncSessionLocal() as session:
        new_listing = Listing(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            **fields,
        )

        session.add(new_listing)
        await session.commit()
        await session.refresh(new_listing)

        logger.info(f"Listing {new_listing.id} created by {owner_id}")
        return _listing_to_dict(new_listing)


async def get_listings() -> List[Dict]:
    """All listings, newest first"""
    async with AsyncSessionLocal() as session:
        stmt = select(Listing).order_by(desc(Listing.created_at))
        result = await session.execute(stmt)
        return [_listing_to_dict(listing) for listing in result.scalars().all()]


async def get_listing_by_id(listing_id: str) -> Dict:
    """Get listing by ID"""
    async with AsyncSessionLocal() as session:
        stmt = select(Listing).where(Listing.id == listing_id)
        result = await session.execute(stmt)
        listing = result.scalar_one_or_none()

        if not listing:
            raise NotFoundError("Listing not found")

        return _listing_to_dict(listing)


async def update_listing(listing_id: str, caller_id: str, update_data: Dict) -> Dict:
    """
    Patch a listing. Unspecified fields keep their values and the merged
    record is validated again before anything is written.
    """
    async with AsyncSessionLocal() as session:
        listing = await _get_owned_listing(session, listing_id, caller_id)

        merged = {field: getattr(listing, field) for field in LISTING_FIELDS}
        merged.update({key: value for key, value in update_data.items() if key in LISTING_FIELDS})
        fields = _validate_listing_fields(merged)

        for key, value in fields.items():
            setattr(listing, key, value)

        await session.commit()
        await session.refresh(listing)

        logger.info(f"Listing {listing_id} updated by {caller_id}")
        return _listing_to_dict(listing)


async def delete_listing(listing_id: str, caller_id: str) -> None:
    """Delete listing permanently"""
    async with AsyncSessionLocal() as session:
        listing = await _get_owned_listing(session, listing_id, caller_id)

        await session.delete(listing)
        await session.commit()

        logger.info(f"Listing {listing_id} deleted by {caller_id}")
