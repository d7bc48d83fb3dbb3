"""Pydantic schemas for users and books.

These schemas validate data coming into the entity store and shape the
records handed back to the CLI.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookStatus(str, Enum):
    """Lending status of a book."""

    AVAILABLE = "Available"
    ON_LOAN = "On Loan"
    REQUESTED = "Requested"  # Declared for the approval flow; never assigned


# ============================================================================
# User Schemas
# ============================================================================


class UserCreate(BaseModel):
    """Schema for creating a user."""

    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    avatar: Optional[str] = None
    trust_score: float = Field(4.0, ge=0, le=5)
    ratings: list[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v

    @field_validator("ratings")
    @classmethod
    def ratings_in_range(cls, v: list[int]) -> list[int]:
        """Validate every rating is 1-5."""
        for rating in v:
            if not 1 <= rating <= 5:
                raise ValueError(f"rating must be between 1 and 5, got {rating}")
        return v


class UserResponse(BaseModel):
    """Schema for user responses (never carries the credential)."""

    id: int
    name: str
    avatar: str
    trust_score: float
    ratings: list[int]
    average_rating: Optional[float] = None

    model_config = {"from_attributes": True}


# ============================================================================
# Book Schemas
# ============================================================================


class BookCreate(BaseModel):
    """Schema for adding a book."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=300)
    genre: str = Field(..., min_length=1, max_length=100)

    @field_validator("title", "author", "genre")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("value cannot be blank")
        return v


class BookResponse(BaseModel):
    """Schema for book responses."""

    id: int
    title: str
    author: str
    genre: str
    owner_id: int
    status: BookStatus
    borrower_id: Optional[int] = None
    loan_end_date: Optional[datetime] = None

    # Related data (populated by manager)
    owner_name: Optional[str] = None
    borrower_name: Optional[str] = None
