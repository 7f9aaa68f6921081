"""
Postboard Backend — User Service
==================================

What:  Registration, login and user lookups, plus maintenance of each user's
       denormalized list of post ids.
Who:   GraphQL resolvers (createUser, login), PostService (owner lookup and
       post-list updates).

Error Mapping:
    invalid email / short password  → ValidationError (422)
    email already registered        → ConflictError (409)
    unknown email at login          → AuthenticationError "User not found." (401)
    wrong password at login         → AuthenticationError "Password is incorrect." (401)
    driver failure                  → DatabaseError (500)
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import AuthenticationError, ConflictError, DatabaseError
from postboard.models.user import DEFAULT_STATUS, User
from postboard.schemas.auth import AuthData, Identity
from postboard.services.auth_service import credential_service
from postboard.validation import validate_user_input

logger = logging.getLogger(__name__)


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    """Returns None for anything that is not a UUID instead of raising."""
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None


class UserService:
    """Business logic for user records. Stateless; the session is passed per call."""

    async def get_user(self, db: AsyncSession, user_id: str) -> Optional[User]:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        try:
            return await db.get(User, uid)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def create_user(self, db: AsyncSession, email: str, name: str, password: str) -> User:
        """
        Register a new user.

        Workflow:
            1. Validate email syntax and password length (all failures at once)
            2. Reject an already registered email before inserting
            3. Hash the password and insert the user with an empty post list

        Raises:
            ValidationError, ConflictError, DatabaseError
        """
        validate_user_input(email, password)

        if await self.get_user_by_email(db, email) is not None:
            raise ConflictError(context={"email": email})

        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            password=credential_service.hash_password(password),
            status=DEFAULT_STATUS,
            post_ids=[],
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Concurrent registration won the unique index
            await db.rollback()
            raise ConflictError(context={"email": email})
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User registered: %s", user.id)
        return user

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthData:
        """
        Check credentials and issue a bearer token.

        Both failure paths answer 401; only the message differs.
        """
        user = await self.get_user_by_email(db, email)
        if user is None:
            raise AuthenticationError("User not found.", context={"email": email})

        if not credential_service.verify_password(password, user.password):
            raise AuthenticationError("Password is incorrect.", context={"user_id": str(user.id)})

        user_id = str(user.id)
        token = credential_service.issue_token(Identity(user_id=user_id, email=user.email))
        logger.info("User logged in: %s", user_id)
        return AuthData(token=token, user_id=user_id)

    # ── Denormalized post list ────────────────────────────────────────────

    def add_post(self, user: User, post_id: uuid.UUID) -> None:
        user.post_ids = [*(user.post_ids or []), str(post_id)]

    def remove_post(self, user: User, post_id: uuid.UUID) -> None:
        user.post_ids = [pid for pid in (user.post_ids or []) if pid != str(post_id)]


user_service = UserService()
