"""Pydantic schemas for wishlists."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class WishlistEntryCreate(BaseModel):
    """Schema for adding a wishlist entry."""

    text: str = Field(..., min_length=1, max_length=500)

    @field_validator("text")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank entries."""
        v = v.strip()
        if not v:
            raise ValueError("wishlist entry cannot be blank")
        return v


class WishlistEntryResponse(BaseModel):
    """Schema for wishlist entry responses."""

    id: int
    user_id: int
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}
