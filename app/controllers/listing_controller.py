"""
Listing Controller - public reads, owner-only writes
"""
from fastapi import APIRouter, Depends, status
from app.schemas.common import MessageResponse
from app.schemas.listing import (
    ListingCreateRequest,
    ListingUpdateRequest,
    ListingCreatedResponse,
    ListingDetailResponse,
    ListingMutationResponse,
    ListingListResponse,
)
from app.services.listing_service import (
    create_listing,
    get_listings,
    get_listing_by_id,
    update_listing,
    delete_listing,
)
from app.utils.dependencies import get_current_user_id

router = APIRouter(prefix="/api/listings", tags=["Listings"])


@router.post("", response_model=ListingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_listing_endpoint(
    request: ListingCreateRequest,
    user_id: str = Depends(get_current_user_id)
):
    """Create a listing owned by the caller"""
    listing = await create_listing(owner_id=user_id, listing_data=request.model_dump())
    return {
        "success": True,
        "message": "Listing created",
        "listing_id": listing["id"],
        "data": listing,
    }


@router.get("", response_model=ListingListResponse)
async def get_all_listings():
    """All listings, most recent first"""
    listings = await get_listings()
    return {"success": True, "data": listings}


@router.get("/{listing_id}", response_model=ListingDetailResponse)
async def get_listing(listing_id: str):
    listing = await get_listing_by_id(listing_id)
    return {"success": True, "data": listing}


@router.put("/{listing_id}", response_model=ListingMutationResponse)
async def update_listing_endpoint(
    listing_id: str,
    request: ListingUpdateRequest,
    user_id: str = Depends(get_current_user_id)
):
    """Update listing details (partial)"""
    listing = await update_listing(
        listing_id=listing_id,
        caller_id=user_id,
        update_data=request.model_dump(exclude_unset=True),
    )
    return {"success": True, "message": "Listing updated", "data": listing}


@router.delete("/{listing_id}", response_model=MessageResponse)
async def delete_listing_endpoint(
    listing_id: str,
    user_id: str = Depends(get_current_user_id)
):
    await delete_listing(listing_id, user_id)
    return {"success": True, "message": "Listing deleted"}
