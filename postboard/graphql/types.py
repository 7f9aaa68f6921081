"""
Postboard Backend — GraphQL Object and Input Types
====================================================

What:  Strawberry types for User, Post, AuthData and the two input objects.
How:   Python attributes are snake_case; strawberry exposes them in camelCase
       (imageUrl, createdAt, userId). Identifiers are exposed as `_id`.

User.password is part of the schema for client compatibility but always
resolves to null.
"""

from datetime import datetime, timezone
from typing import List, Optional

import strawberry
from strawberry.types import Info

from postboard.graphql.context import GraphQLContext
from postboard.models.post import Post
from postboard.models.user import User
from postboard.schemas.auth import AuthData
from postboard.services.post_service import post_service


def to_iso(value: datetime) -> str:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID = strawberry.field(name="_id")
    name: str
    email: str
    status: str
    password: Optional[str] = None

    @strawberry.field
    async def posts(self, info: Info[GraphQLContext, None]) -> List["PostType"]:
        """Posts whose creator is this user, oldest first."""
        async with info.context.session() as db:
            posts = await post_service.list_posts_by_creator(db, str(self.id))
        return [PostType.from_model(post) for post in posts]

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=strawberry.ID(str(user.id)),
            name=user.name,
            email=user.email,
            status=user.status,
        )


@strawberry.type(name="Post")
class PostType:
    id: strawberry.ID = strawberry.field(name="_id")
    title: str
    content: str
    image_url: str
    creator: UserType
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, post: Post) -> "PostType":
        return cls(
            id=strawberry.ID(str(post.id)),
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            creator=UserType.from_model(post.creator),
            created_at=to_iso(post.created_at),
            updated_at=to_iso(post.updated_at),
        )


@strawberry.type(name="AuthData")
class AuthDataType:
    token: str
    user_id: str

    @classmethod
    def from_model(cls, auth: AuthData) -> "AuthDataType":
        return cls(token=auth.token, user_id=auth.user_id)


@strawberry.input(name="UserInputData")
class UserInput:
    email: str
    name: str
    password: str


@strawberry.input(name="PostInputData")
class PostInput:
    title: str
    content: str
    image_url: str
