"""
Postboard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the REST contract (feed, image upload, health).
How:   FastAPI serializes responses by alias, so fields use the camelCase names
       REST clients already consume (`_id`, `imageUrl`, `totalItems`, ...).
Who:   REST route handlers. The GraphQL surface has its own types in
       postboard/graphql/types.py.

Schemas are separate from SQLAlchemy models so that password hashes and the
denormalized post list never leak into a response.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Identifiers are read from the ORM attribute `id` and written as `_id`
_ID_ALIASES = AliasChoices("id", "_id")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CreatorSummary(_CamelModel):
    """Public view of a post's creator (no password, no post list)."""

    id: uuid.UUID = Field(validation_alias=_ID_ALIASES, serialization_alias="_id")
    name: str
    email: str


class PostResponse(_CamelModel):
    """
    What:  Full representation of a post.
    Who:   Returned by every /feed endpoint that yields a post.
    """

    id: uuid.UUID = Field(
        validation_alias=_ID_ALIASES, serialization_alias="_id", description="Post identifier"
    )
    title: str
    content: str
    image_url: str = Field(description="URL of the post image")
    creator: CreatorSummary
    created_at: datetime
    updated_at: datetime


class PostListResponse(_CamelModel):
    """
    Page of posts plus the overall total.

    totalItems counts every post, independent of the requested page, so
    clients can compute the number of pages.
    """

    posts: List[PostResponse]
    total_items: int


class PostDetailResponse(_CamelModel):
    post: PostResponse


class PostMutationResponse(_CamelModel):
    message: str
    post: PostResponse


class DeletePostResponse(_CamelModel):
    message: str
    redirect_page: int = Field(description="Page the client should reload after deletion")


class ImageUploadResponse(_CamelModel):
    """
    What:  Result of PUT /post/post-image.

    file_path is the public path to reference from a post's imageUrl; it is
    absent when the request carried no file.
    """

    message: str
    file_path: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized REST error body.

    Example:
        {
            "message": "Invalid input.",
            "data": [{"message": "Title is invalid."}],
            "request_id": "a1b2c3d4"
        }
    """

    message: str = Field(description="Human-readable error description")
    data: Optional[List[Dict[str, str]]] = Field(default=None, description="Per-field failures")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
