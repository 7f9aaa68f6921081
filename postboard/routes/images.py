"""
Postboard Backend — Image Upload Route
========================================

What:  Handles PUT /post/post-image, the upload step that precedes a GraphQL
       createPost/updatePost.
How:   Receives a multipart upload, delegates to FileService, returns the
       public path the client then sends as the post's imageUrl.
Who:   Called by the frontend editor before it submits a post.

Request Flow:
    1. AuthMiddleware resolved the caller; anonymous requests get 401
    2. No `image` field → 200 {"message": "No file provided."}
    3. FileService validates (image/* only, size) and writes the file
    4. `oldPath`, when sent, is cleared best-effort unless a post of another
       user still references it
    5. 201 {"message": "File stored.", "filePath": "images/<name>"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.middleware.auth import get_current_identity
from postboard.schemas.auth import Identity
from postboard.schemas.post import ErrorResponse, ImageUploadResponse
from postboard.services.file_service import file_service
from postboard.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/post", tags=["Images"])


@router.put(
    "/post-image",
    status_code=201,
    response_model=ImageUploadResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Request carried no file", "model": ImageUploadResponse},
        201: {"description": "Image stored", "model": ImageUploadResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
        422: {"description": "Not an image, or too large", "model": ErrorResponse},
    },
    summary="Upload a post image",
)
async def upload_post_image(
    image: Optional[UploadFile] = File(None, description="Image file (any image/* type)"),
    old_path: Optional[str] = Form(
        None,
        alias="oldPath",
        description="Previously uploaded image to remove once the new one is stored",
    ),
    db: AsyncSession = Depends(get_db_session),
    identity: Identity = Depends(get_current_identity),
):
    if image is None:
        return JSONResponse(status_code=200, content={"message": "No file provided."})

    try:
        content = await image.read()
        logger.info(
            "Received image upload from %s: filename=%s, size=%d bytes",
            identity.user_id,
            image.filename or "unknown",
            len(content),
        )
        file_path = await file_service.store_image(
            filename=image.filename,
            content=content,
            content_type=image.content_type,
        )
    finally:
        await image.close()

    if old_path:
        if await post_service.image_referenced_by_others(db, old_path, identity.user_id):
            logger.warning(
                "Keeping %s for %s: another user's post references it",
                old_path,
                identity.user_id,
            )
        else:
            await file_service.clear_image(old_path)

    return ImageUploadResponse(message="File stored.", file_path=file_path)
