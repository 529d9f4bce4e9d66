from pydantic import Field
from typing import Optional, List, Literal
from app.schemas.common import CamelModel

MIN_ROOMS = 1
MAX_ROOMS = 6
MIN_REGULAR_PRICE = 1_000_000
MAX_REGULAR_PRICE = 20_000_000

ListingType = Literal["sale", "rent"]


class ListingCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: ListingType
    bedrooms: int = Field(..., ge=MIN_ROOMS, le=MAX_ROOMS)
    bathrooms: int = Field(..., ge=MIN_ROOMS, le=MAX_ROOMS)
    regular_price: int = Field(..., ge=MIN_REGULAR_PRICE, le=MAX_REGULAR_PRICE)
    discount_price: int = Field(0, ge=0)  # only meaningful when offer is true
    parking: bool = False
    furnished: bool = False
    offer: bool = False
    images: List[str] = Field(default_factory=list)


class ListingUpdateRequest(CamelModel):
    """Partial update; the merged record is re-validated against ListingCreateRequest"""
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[ListingType] = None
    bedrooms: Optional[int] = Field(None, ge=MIN_ROOMS, le=MAX_ROOMS)
    bathrooms: Optional[int] = Field(None, ge=MIN_ROOMS, le=MAX_ROOMS)
    regular_price: Optional[int] = Field(None, ge=MIN_REGULAR_PRICE, le=MAX_REGULAR_PRICE)
    discount_price: Optional[int] = Field(None, ge=0)
    parking: Optional[bool] = None
    furnished: Optional[bool] = None
    offer: Optional[bool] = None
    images: Optional[List[str]] = None


class ListingResponse(CamelModel):
    id: str
    owner_id: str
    name: str
    address: str
    description: Optional[str] = None
    type: str
    bedrooms: int
    bathrooms: int
    regular_price: int
    discount_price: int
    parking: bool
    furnished: bool
    offer: bool
    images: List[str]
    created_at: str
    updated_at: str


class ListingCreatedResponse(CamelModel):
    success: bool = True
    message: str
    listing_id: str
    data: ListingResponse


class ListingDetailResponse(CamelModel):
    success: bool = True
    data: ListingResponse


class ListingMutationResponse(CamelModel):
    success: bool = True
    message: str
    data: ListingResponse


class ListingListResponse(CamelModel):
    success: bool = True
    data: List[ListingResponse]
