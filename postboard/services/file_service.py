"""
Postboard Backend — Image Storage Service
===========================================

What:  Stores uploaded post images in the public images directory and removes
       images that a post no longer references.
How:   Checks the declared content type and size, derives a collision-free
       filename, writes with aiofiles.
Who:   PUT /post/post-image and the REST feed create/update routes.

Filename format:
    <sanitized original stem>-<epoch millis>-<random 0..1e9>.<mime subtype>
    e.g. "sunset-1700000000000-483920113.jpeg"

    The extension comes from the content type, not from the client filename.

Stored files are served by the /images static mount; the service returns the
public relative path ("images/<name>") that clients put into a post's imageUrl.
"""

import logging
import random
import re
import time
from pathlib import Path
from typing import Optional

import aiofiles

from postboard.config import settings
from postboard.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

IMAGES_DIRNAME = "images"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class FileService:
    """
    Manages the lifecycle of uploaded images.

    Directory Structure:
        public/
        └── images/
            ├── sunset-1700000000000-483920113.jpeg
            └── notes-1700000000123-120394857.png
    """

    def __init__(self, public_root: Optional[str] = None):
        """
        Args:
            public_root: Override the public directory (used in tests).
        """
        self.public_root = Path(public_root or settings.public_root).resolve()
        self.images_dir = self.public_root / IMAGES_DIRNAME
        self.images_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with images_dir=%s", self.images_dir)

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """
        Returns:
            The file extension derived from the MIME subtype (e.g. "jpeg").

        Raises:
            ValidationError: content type is missing or not image/*
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError(
                message="Only image files are allowed!",
                data=[{"message": "Only image files are allowed!"}],
                context={"content_type": content_type},
            )
        subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip()
        # image/svg+xml → svg
        return _UNSAFE_CHARS.sub("", subtype.split("+", 1)[0]).lower() or "img"

    def validate_size(self, size: int) -> None:
        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                data=[{"message": f"File size exceeds maximum of {max_mb:.0f}MB."}],
                context={"actual_size": size},
            )

    def build_filename(self, original_name: Optional[str], extension: str) -> str:
        stem = _UNSAFE_CHARS.sub("_", Path(original_name or "image").stem).strip("_") or "image"
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{stem}-{unique_suffix}.{extension}"

    async def store_image(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
    ) -> str:
        """
        Validate and write an uploaded image.

        Returns:
            Public relative path, e.g. "images/sunset-1700000000000-4839.jpeg"

        Raises:
            ValidationError: not an image, or too large
            FileStorageError: the write failed
        """
        extension = self.validate_content_type(content_type)
        self.validate_size(len(content))

        name = self.build_filename(filename, extension)
        target = self.images_dir / name
        try:
            self.images_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", name, len(content))
        return f"{IMAGES_DIRNAME}/{name}"

    def resolve_public_path(self, file_path: str) -> Optional[Path]:
        """
        Map a stored reference back to a file inside the images directory.

        Accepts "images/x.png", "/images/x.png", "public/images/x.png" or a full
        URL ending in "/images/x.png". Returns None for anything that would
        resolve outside the images directory.
        """
        marker = f"{IMAGES_DIRNAME}/"
        index = file_path.rfind(marker)
        if index == -1:
            return None
        candidate = (self.images_dir / file_path[index + len(marker):]).resolve()
        if candidate.parent != self.images_dir:
            return None
        return candidate

    async def clear_image(self, file_path: str) -> None:
        """
        Best-effort removal of a replaced image.

        Never raises: a failed deletion is logged and the request carries on.
        """
        path = self.resolve_public_path(file_path)
        if path is None:
            logger.warning("Refusing to clear image outside images dir: %s", file_path)
            return
        try:
            path.unlink()
            logger.info("Cleared image: %s", path.name)
        except FileNotFoundError:
            logger.warning("Image to clear does not exist: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clear image %s: %s", path.name, str(e))


file_service = FileService()
