"""
Postboard Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Who:   UserService (registration, lookups, post-list maintenance) and the
       credential service (login).

Table Design:
    - email: unique index; uniqueness is also checked before insert so the
      common case gets a readable error instead of an IntegrityError
    - password: bcrypt hash, never the plain password
    - post_ids: JSON array of owned post ids, in creation order. This is a
      convenience index; Post.creator_id is the source of truth.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from postboard.database import Base

DEFAULT_STATUS = "I am new!"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered author.

    Lifecycle:
        1. Created by registration (status = 'I am new!', post_ids = [])
        2. post_ids grows when the user creates a post, shrinks on delete
        3. Never deleted
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name; unique across users",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    status: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_STATUS)

    # Reassign (never mutate in place) so SQLAlchemy detects the change
    post_ids: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', posts={len(self.post_ids or [])})>"
