from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from app.database.connection import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Listing(Base):
    __tablename__ = "listings"

    id = Column(String, primary_key=True)
    owner_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False, index=True)  # sale | rent
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Integer, nullable=False)
    regular_price = Column(Integer, nullable=False)
    discount_price = Column(Integer, nullable=False, default=0)  # only meaningful when offer is true
    parking = Column(Boolean, nullable=False, default=False)
    furnished = Column(Boolean, nullable=False, default=False)
    offer = Column(Boolean, nullable=False, default=False)
    images = Column(JSON, nullable=False, default=list)
    # Client-side timestamps keep sub-second ordering on every backend
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    owner = relationship("User", backref="listings")

    __table_args__ = (
        Index('idx_listing_created', 'created_at'),
    )
