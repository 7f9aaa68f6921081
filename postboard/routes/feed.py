"""
Postboard Backend — REST Feed Route Handlers
==============================================

What:  Post CRUD over REST under /feed, mirroring the GraphQL operations.
How:   Thin handlers: parse query/form/multipart input, call PostService,
       shape the response with the schemas in postboard/schemas/post.py.
Who:   REST clients of the feed (the GraphQL endpoint serves the SPA).

Route Inventory:
    GET    /feed/posts?page=N        page of 4 posts + totalItems
    POST   /feed/post                create (multipart: title, content, image)
    GET    /feed/post/{post_id}      single post
    PUT    /feed/post/{post_id}      update (image optional; kept when absent)
    DELETE /feed/post/{post_id}      delete, echoes the page to reload

Every route requires an authenticated caller. Images sent here are stored by
FileService and referenced by absolute URL (<base url>images/<name>).
Write routes commit before they build their response.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import commit_session, get_db_session
from postboard.exceptions import ValidationError
from postboard.middleware.auth import get_current_identity
from postboard.schemas.auth import Identity
from postboard.schemas.post import (
    DeletePostResponse,
    ErrorResponse,
    PostDetailResponse,
    PostListResponse,
    PostMutationResponse,
    PostResponse,
)
from postboard.services.file_service import file_service
from postboard.services.post_service import REST_PAGE_SIZE, post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["Feed"])

_ERRORS = {
    401: {"description": "Not authenticated", "model": ErrorResponse},
    422: {"description": "Invalid input", "model": ErrorResponse},
}
_OWNER_ERRORS = {
    **_ERRORS,
    403: {"description": "Caller is not the creator", "model": ErrorResponse},
    404: {"description": "No post found", "model": ErrorResponse},
}


async def _store_upload(request: Request, image: UploadFile) -> str:
    """Stores an uploaded image and returns its absolute URL."""
    try:
        content = await image.read()
        file_path = await file_service.store_image(
            filename=image.filename,
            content=content,
            content_type=image.content_type,
        )
    finally:
        await image.close()
    return f"{request.base_url}{file_path}"


@router.get(
    "/posts",
    response_model=PostListResponse,
    responses=_ERRORS,
    summary="List posts, four per page",
)
async def list_posts(
    page: int = Query(default=1, description="1-based page number"),
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
) -> PostListResponse:
    posts, total = await post_service.list_posts(db, page, REST_PAGE_SIZE)
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        total_items=total,
    )


@router.post(
    "/post",
    status_code=201,
    response_model=PostMutationResponse,
    responses=_ERRORS,
    summary="Create a post",
)
async def create_post(
    request: Request,
    title: str = Form(...),
    content: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
) -> PostMutationResponse:
    if image is None:
        raise ValidationError(
            "No image provided.",
            data=[{"message": "No image provided."}],
        )

    image_url = await _store_upload(request, image)
    try:
        post = await post_service.create_post(
            db, identity, title=title, content=content, image_url=image_url
        )
        await commit_session(db)
    except Exception:
        # The post was never created, so the stored image is orphaned
        await file_service.clear_image(image_url)
        raise

    return PostMutationResponse(
        message="Post created successfully!",
        post=PostResponse.model_validate(post),
    )


@router.get(
    "/post/{post_id}",
    response_model=PostDetailResponse,
    responses={**_ERRORS, 404: {"description": "No post found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
) -> PostDetailResponse:
    post = await post_service.get_post(db, post_id)
    return PostDetailResponse(post=PostResponse.model_validate(post))


@router.put(
    "/post/{post_id}",
    response_model=PostMutationResponse,
    responses=_OWNER_ERRORS,
    summary="Update a post",
)
async def update_post(
    request: Request,
    post_id: str,
    title: str = Form(...),
    content: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
) -> PostMutationResponse:
    image_url = None
    if image is not None:
        image_url = await _store_upload(request, image)

    try:
        post = await post_service.update_post(
            db, post_id, identity, title=title, content=content, image_url=image_url
        )
        await commit_session(db)
    except Exception:
        if image_url is not None:
            await file_service.clear_image(image_url)
        raise

    return PostMutationResponse(
        message="Update successful",
        post=PostResponse.model_validate(post),
    )


@router.delete(
    "/post/{post_id}",
    response_model=DeletePostResponse,
    responses=_OWNER_ERRORS,
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    page: int = Query(default=1, description="Page the client was viewing"),
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
) -> DeletePostResponse:
    await post_service.delete_post(db, post_id, identity)
    await commit_session(db)
    return DeletePostResponse(
        message="Deleting process is successful",
        redirect_page=page,
    )
