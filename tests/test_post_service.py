"""
Postboard Backend — Post Service Unit Tests
=============================================

What:  Pagination guards, ownership checks and the owner's post list.
How:   Mock DB sessions (no real DB).

What we test:
    ✅ invalid page → ValidationError
    ✅ unknown or malformed id → NotFoundError
    ✅ non-creator update/delete → AuthorizationError, nothing written
    ✅ update keeps the previous image when none is supplied
    ✅ create/delete keep the owner's post list in step
    ✅ image lookups only count other users' posts
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from postboard.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from postboard.schemas.auth import Identity
from postboard.services.post_service import PostService


def _owner_identity(user) -> Identity:
    return Identity(user_id=str(user.id), email=user.email)


class TestReads:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", [0, -1])
    async def test_invalid_page(self, mock_db_session, page):
        with pytest.raises(ValidationError, match="Invalid page number."):
            await self.service.list_posts(mock_db_session, page, 2)
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_posts_returns_page_and_total(self, mock_db_session, make_post):
        posts = [make_post(), make_post()]
        result = MagicMock()
        result.scalars.return_value.all.return_value = posts
        mock_db_session.execute.return_value = result
        mock_db_session.scalar.return_value = 7

        page, total = await self.service.list_posts(mock_db_session, 2, 2)

        assert page == posts
        assert total == 7

    @pytest.mark.asyncio
    async def test_get_post_missing(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_post(mock_db_session, str(uuid4()))
        assert exc_info.value.message == "No post found!"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_post_malformed_id(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_post(mock_db_session, "not-an-id")
        mock_db_session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_posts_by_creator_malformed_id(self, mock_db_session):
        assert await self.service.list_posts_by_creator(mock_db_session, "bogus") == []


class TestCreatePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_create_appends_to_owner(self, mock_db_session, make_user):
        owner = make_user()
        mock_db_session.get.return_value = owner

        post = await self.service.create_post(
            mock_db_session,
            _owner_identity(owner),
            title="Hello",
            content="World!",
            image_url="images/a.png",
        )

        assert post.creator is owner
        assert post.creator_id == owner.id
        assert post.image_url == "images/a.png"
        assert owner.post_ids == [str(post.id)]
        mock_db_session.add.assert_called_once_with(post)

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_input(self, mock_db_session, identity):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_post(
                mock_db_session, identity, title="Hi", content="World!", image_url="x"
            )
        assert exc_info.value.data == [{"message": "Title is invalid."}]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_for_deleted_user(self, mock_db_session, identity):
        mock_db_session.get.return_value = None

        with pytest.raises(AuthenticationError, match="User not found."):
            await self.service.create_post(
                mock_db_session, identity, title="Hello", content="World!", image_url="x"
            )


class TestUpdatePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_update_by_creator(self, mock_db_session, make_post):
        post = make_post()
        mock_db_session.get.return_value = post

        updated = await self.service.update_post(
            mock_db_session,
            str(post.id),
            _owner_identity(post.creator),
            title="New title",
            content="New content",
            image_url="images/new.png",
        )

        assert updated.title == "New title"
        assert updated.content == "New content"
        assert updated.image_url == "images/new.png"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_url", [None, "", "undefined"])
    async def test_update_keeps_previous_image(self, mock_db_session, make_post, image_url):
        post = make_post(image_url="images/original.png")
        mock_db_session.get.return_value = post

        updated = await self.service.update_post(
            mock_db_session,
            str(post.id),
            _owner_identity(post.creator),
            title="New title",
            content="New content",
            image_url=image_url,
        )

        assert updated.image_url == "images/original.png"

    @pytest.mark.asyncio
    async def test_update_by_other_user_is_forbidden(
        self, mock_db_session, make_post, other_identity
    ):
        post = make_post(title="Original")
        mock_db_session.get.return_value = post

        with pytest.raises(AuthorizationError) as exc_info:
            await self.service.update_post(
                mock_db_session,
                str(post.id),
                other_identity,
                title="Hijacked",
                content="Hijacked content",
            )

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Not authorized!"
        assert post.title == "Original"
        mock_db_session.flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_ownership_checked_before_validation(
        self, mock_db_session, make_post, other_identity
    ):
        mock_db_session.get.return_value = make_post()

        with pytest.raises(AuthorizationError):
            await self.service.update_post(
                mock_db_session, str(uuid4()), other_identity, title="", content=""
            )


class TestDeletePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_delete_removes_from_owner_list(self, mock_db_session, make_user, make_post):
        owner = make_user()
        post = make_post(creator=owner)
        owner.post_ids = [str(post.id), "other"]
        mock_db_session.get.return_value = post

        assert await self.service.delete_post(
            mock_db_session, str(post.id), _owner_identity(owner)
        ) is True

        mock_db_session.delete.assert_awaited_once_with(post)
        assert owner.post_ids == ["other"]

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_forbidden(
        self, mock_db_session, make_user, make_post, other_identity
    ):
        owner = make_user()
        post = make_post(creator=owner)
        owner.post_ids = [str(post.id)]
        mock_db_session.get.return_value = post

        with pytest.raises(AuthorizationError):
            await self.service.delete_post(mock_db_session, str(post.id), other_identity)

        mock_db_session.delete.assert_not_called()
        assert owner.post_ids == [str(post.id)]

    @pytest.mark.asyncio
    async def test_delete_missing_post(self, mock_db_session, identity):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.delete_post(mock_db_session, str(uuid4()), identity)


class TestImageReferences:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_referenced_by_another_user(self, mock_db_session, identity):
        mock_db_session.scalar.return_value = uuid4()

        assert await self.service.image_referenced_by_others(
            mock_db_session, "images/cat-1.jpeg", identity.user_id
        ) is True

    @pytest.mark.asyncio
    async def test_unreferenced(self, mock_db_session, identity):
        mock_db_session.scalar.return_value = None

        assert await self.service.image_referenced_by_others(
            mock_db_session, "http://localhost:8080/images/cat-1.jpeg", identity.user_id
        ) is False

    @pytest.mark.asyncio
    async def test_empty_reference_skips_lookup(self, mock_db_session, identity):
        assert await self.service.image_referenced_by_others(
            mock_db_session, "", identity.user_id
        ) is False
        mock_db_session.scalar.assert_not_called()
