"""SQLAlchemy models for wishlists.

Tables:
- wishlist_entries: Title fragments a user is looking for
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, utcnow


class WishlistEntry(Base):
    """Wishlist entry model - a title (or part of one) a user wants."""

    __tablename__ = "wishlist_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(String(500), nullable=False)

    created_at: Mapped[str] = mapped_column(
        String(32), default=lambda: utcnow().isoformat()
    )

    def __repr__(self) -> str:
        return f"<WishlistEntry(id={self.id}, user_id={self.user_id}, text='{self.text}')>"
