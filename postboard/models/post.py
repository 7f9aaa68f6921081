"""
Postboard Backend — Post SQLAlchemy Model
===========================================

What:  ORM model for the `posts` table.
Who:   PostService for CRUD and pagination; Alembic for schema management.

Table Design:
    - creator_id: FK to users.id, set once at creation and never changed.
      Ownership checks on update/delete compare against this column.
    - image_url: URL or public path of the post image
    - created_at index: both listing surfaces page in creation order
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from postboard.database import Base
from postboard.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by exactly one user.

    Query Patterns:
        - Page through posts: ORDER BY created_at LIMIT :size OFFSET :skip
        - Get single post: primary key lookup, creator loaded with selectinload
        - Posts of a user: WHERE creator_id = :user_id
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    image_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default="",
        comment="URL or public path of the post image",
    )

    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    creator: Mapped[User] = relationship(User, lazy="raise")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("idx_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}', creator_id={self.creator_id})>"
