"""
Postboard Backend — File Service Unit Tests
=============================================

What:  Tests for image upload validation, storage and cleanup.
Why:   Uploads are a security boundary: only images, bounded size, and
       cleanup confined to the images directory.
How:   Each test gets its own FileService rooted in a temporary public dir.

Test Strategy:
    ✅ image/* accepted, extension taken from the MIME subtype
    ✅ non-image content types rejected
    ✅ size limit
    ✅ stored filename format and public path
    ✅ clear_image removes files inside images/ and ignores everything else
"""

import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from postboard.exceptions import FileStorageError, ValidationError
from postboard.services.file_service import FileService


class TestFileValidation:

    @pytest.fixture(autouse=True)
    def _service(self, temp_public):
        self.service = FileService(public_root=temp_public)

    # ── Content Type ──────────────────────────────────────────────────────

    @pytest.mark.parametrize(
        "content_type, extension",
        [
            ("image/png", "png"),
            ("image/jpeg", "jpeg"),
            ("image/gif", "gif"),
            ("image/svg+xml", "svg"),
            ("image/webp; charset=binary", "webp"),
        ],
    )
    def test_image_types_accepted(self, content_type, extension):
        assert self.service.validate_content_type(content_type) == extension

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", "", None])
    def test_non_images_rejected(self, content_type):
        with pytest.raises(ValidationError, match="Only image files are allowed!"):
            self.service.validate_content_type(content_type)

    # ── Size ──────────────────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(1000)

    def test_size_over_limit(self):
        with patch("postboard.services.file_service.settings") as mock_settings:
            mock_settings.max_file_size = 1024 * 1024
            with pytest.raises(ValidationError, match="exceeds maximum of 1MB"):
                self.service.validate_size(1024 * 1024 + 1)

    # ── Filenames ─────────────────────────────────────────────────────────

    def test_build_filename_format(self):
        name = self.service.build_filename("my holiday.photo.JPG", "jpeg")
        assert re.fullmatch(r"my_holiday_photo-\d{13}-\d+\.jpeg", name)

    def test_build_filename_strips_directories(self):
        name = self.service.build_filename("../../etc/passwd", "png")
        assert "/" not in name
        assert name.startswith("passwd-")

    def test_build_filename_without_original(self):
        assert self.service.build_filename(None, "png").startswith("image-")


class TestFileStorage:

    @pytest.fixture(autouse=True)
    def _service(self, temp_public):
        self.service = FileService(public_root=temp_public)

    @pytest.mark.asyncio
    async def test_store_image_writes_file(self, sample_image_bytes):
        file_path = await self.service.store_image("cat.jpg", sample_image_bytes, "image/jpeg")

        assert file_path.startswith("images/cat-")
        assert file_path.endswith(".jpeg")
        stored = self.service.public_root / file_path
        assert stored.read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_store_rejects_non_image(self, sample_image_bytes):
        with pytest.raises(ValidationError):
            await self.service.store_image("doc.pdf", sample_image_bytes, "application/pdf")
        assert list(self.service.images_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_write_failure(self, sample_image_bytes):
        with patch("aiofiles.open", new_callable=MagicMock) as mock_open:
            mock_open.return_value.__aenter__ = AsyncMock(side_effect=OSError("disk full"))
            mock_open.return_value.__aexit__ = AsyncMock(return_value=False)

            with pytest.raises(FileStorageError):
                await self.service.store_image("cat.jpg", sample_image_bytes, "image/jpeg")

    # ── Cleanup ───────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reference",
        ["images/old.png", "/images/old.png", "http://localhost:8080/images/old.png"],
    )
    async def test_clear_image_removes_file(self, reference):
        target = self.service.images_dir / "old.png"
        target.write_bytes(b"old")

        await self.service.clear_image(reference)
        assert not target.exists()

    @pytest.mark.asyncio
    async def test_clear_image_nonexistent(self):
        # Should not raise
        await self.service.clear_image("images/nonexistent.png")

    @pytest.mark.asyncio
    async def test_clear_image_refuses_outside_images_dir(self):
        outside = self.service.public_root / "secret.txt"
        outside.write_bytes(b"keep me")

        await self.service.clear_image("images/../secret.txt")
        await self.service.clear_image("secret.txt")
        assert outside.exists()
