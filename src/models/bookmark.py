"""Bookmark model for storing enriched user bookmarks."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, CreatedAtMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.user import User


class Bookmark(Base, UUIDv7Mixin, CreatedAtMixin):
    """Bookmark model - stores a URL with its derived title, favicon, summary and tags."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Manual ordering within one owner's collection
        Index("ix_bookmarks_user_id_position", "user_id", "position"),
        # Chronological listing and analytics windows
        Index("ix_bookmarks_user_id_created_at", "user_id", "created_at"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    favicon: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Normalized tags (see schemas.validators.normalize_tags); order of entry is kept
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    user: Mapped["User"] = relationship(back_populates="bookmarks")
