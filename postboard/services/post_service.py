"""
Postboard Backend — Post Service (Business Logic Orchestrator)
================================================================

What:  Create/read/update/delete/paginate posts, enforcing creator ownership.
How:   Async SQLAlchemy queries; every returned post has its creator loaded
       (selectinload) so callers can serialize it without further I/O.
Who:   REST feed routes and GraphQL resolvers.

Mutation Order:
    update/delete:  fetch (404) → ownership (403) → validation (422) → write
    create:         validation (422) → owner lookup (401) → write post
                    → append id to the owner's post list

    Post.creator_id is the source of truth for ownership. User.post_ids is a
    convenience index kept in step by the create and delete paths; both writes
    run in the request's session and are committed together.

Pagination:
    Offset pagination in creation order. The REST feed pages by 4 and the
    GraphQL `posts` query by 2; the page size is always passed in by the caller.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from postboard.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from postboard.models.post import Post
from postboard.schemas.auth import Identity
from postboard.services.file_service import IMAGES_DIRNAME
from postboard.services.user_service import parse_uuid, user_service
from postboard.validation import validate_post_input

logger = logging.getLogger(__name__)

REST_PAGE_SIZE = 4
GRAPHQL_PAGE_SIZE = 2

# Values meaning "no new image" on update; browser clients send the string
# "undefined" when the image input was left untouched
UNCHANGED_IMAGE_VALUES = {None, "", "undefined"}


class PostService:
    """
    Business logic layer for post operations.

    Database errors are wrapped in DatabaseError (hides driver details);
    domain errors propagate unchanged.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_posts(
        self, db: AsyncSession, page: int, page_size: int
    ) -> Tuple[List[Post], int]:
        """
        One page of posts in creation order, plus the total post count.

        Returns:
            (posts, total) where len(posts) <= page_size and total counts every
            post regardless of page.

        Raises:
            ValidationError: page < 1
        """
        if page is None or page < 1:
            raise ValidationError("Invalid page number.", context={"page": page})

        try:
            result = await db.execute(
                select(Post)
                .options(selectinload(Post.creator))
                .order_by(Post.created_at.asc(), Post.id.asc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            posts = list(result.scalars().all())
            total = await self.count_posts(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return posts, total

    async def count_posts(self, db: AsyncSession) -> int:
        try:
            total = await db.scalar(select(func.count(Post.id)))
        except SQLAlchemyError as e:
            logger.error("Database error counting posts: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})
        return total or 0

    async def list_posts_by_creator(self, db: AsyncSession, user_id: str) -> List[Post]:
        uid = parse_uuid(user_id)
        if uid is None:
            return []
        try:
            result = await db.execute(
                select(Post)
                .options(selectinload(Post.creator))
                .where(Post.creator_id == uid)
                .order_by(Post.created_at.asc())
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing posts of %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})
        return list(result.scalars().all())

    async def image_referenced_by_others(
        self, db: AsyncSession, file_path: str, user_id: str
    ) -> bool:
        """True when a post of someone other than `user_id` uses the stored image."""
        name = file_path.rstrip("/").rsplit("/", 1)[-1]
        if not name:
            return False
        query = select(Post.id).where(
            Post.image_url.endswith(f"{IMAGES_DIRNAME}/{name}", autoescape=True)
        )
        uid = parse_uuid(user_id)
        if uid is not None:
            query = query.where(Post.creator_id != uid)
        try:
            found = await db.scalar(query.limit(1))
        except SQLAlchemyError as e:
            logger.error("Database error looking up image %s: %s", file_path, str(e))
            raise DatabaseError(context={"file_path": file_path})
        return found is not None

    async def get_post(self, db: AsyncSession, post_id: str) -> Post:
        """
        Raises:
            NotFoundError: unknown or malformed id ("No post found!", 404)
        """
        pid = parse_uuid(post_id)
        if pid is None:
            raise NotFoundError(resource_id=str(post_id))

        try:
            post = await db.get(Post, pid, options=[selectinload(Post.creator)])
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(context={"post_id": str(post_id)})

        if post is None:
            raise NotFoundError(resource_id=str(post_id))
        return post

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_post(
        self,
        db: AsyncSession,
        identity: Identity,
        title: str,
        content: str,
        image_url: str,
    ) -> Post:
        """
        Create a post owned by `identity` and list it under the owner.

        Raises:
            ValidationError: title/content rules failed
            AuthenticationError: the token's user no longer exists ("User not found.")
        """
        validate_post_input(title, content)

        owner = await user_service.get_user(db, identity.user_id)
        if owner is None:
            raise AuthenticationError("User not found.", context={"user_id": identity.user_id})

        post = Post(
            id=uuid.uuid4(),
            title=title,
            content=content,
            image_url=image_url or "",
            creator_id=owner.id,
            creator=owner,
        )
        db.add(post)
        try:
            await db.flush()
            user_service.add_post(owner, post.id)
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Post %s created by %s", post.id, owner.id)
        return post

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        identity: Identity,
        title: str,
        content: str,
        image_url: Optional[str] = None,
    ) -> Post:
        """
        Update title/content (and the image when a new one is supplied).

        Raises:
            NotFoundError, AuthorizationError, ValidationError
        """
        post = await self.get_post(db, post_id)
        self._ensure_creator(post, identity)
        validate_post_input(title, content)

        post.title = title
        post.content = content
        if image_url not in UNCHANGED_IMAGE_VALUES:
            post.image_url = image_url
        post.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error updating post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"post_id": str(post_id)})

        logger.info("Post %s updated by %s", post.id, identity.user_id)
        return post

    async def delete_post(self, db: AsyncSession, post_id: str, identity: Identity) -> bool:
        """
        Delete a post and drop its id from the owner's post list.

        Raises:
            NotFoundError, AuthorizationError
        """
        post = await self.get_post(db, post_id)
        self._ensure_creator(post, identity)

        owner = post.creator
        try:
            await db.delete(post)
            await db.flush()
            user_service.remove_post(owner, post.id)
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"post_id": str(post_id)})

        logger.info("Post %s deleted by %s", post.id, identity.user_id)
        return True

    def _ensure_creator(self, post: Post, identity: Identity) -> None:
        if str(post.creator_id) != identity.user_id:
            logger.warning(
                "User %s attempted to modify post %s owned by %s",
                identity.user_id,
                post.id,
                post.creator_id,
            )
            raise AuthorizationError(
                context={"post_id": str(post.id), "user_id": identity.user_id}
            )


post_service = PostService()
