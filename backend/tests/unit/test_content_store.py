"""
Unit tests for the content store service.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from infrastructure.database.models import Photo, PhotoComment, PhotoLike
from services.content_store import ContentStore

pytestmark = pytest.mark.asyncio


class TestPhotos:
    """Tests for photo create, update and delete."""

    async def test_create_photo(self, db_session, creator_user):
        store = ContentStore(db_session)

        photo = await store.create(
            creator_user.id, "http://test/uploads/a.jpg", description="Sunset", is_premium=True
        )

        assert photo.id is not None
        assert photo.creator_id == creator_user.id
        assert photo.is_premium is True
        assert photo.description == "Sunset"
        assert photo.created_at is not None

    async def test_create_defaults_to_public(self, db_session, creator_user):
        photo = await ContentStore(db_session).create(creator_user.id, "http://test/uploads/b.jpg")
        assert photo.is_premium is False
        assert photo.description is None

    async def test_get_missing_photo(self, db_session):
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).get(12345)

    async def test_update_applies_only_known_fields(self, db_session, creator_user, photo_factory):
        photo = await photo_factory(creator_user, description="old")
        original_url = photo.url

        updated = await ContentStore(db_session).update(
            photo.id,
            creator_user.id,
            {"description": "new", "is_premium": True, "url": "http://evil/x.jpg", "creator_id": 99},
        )

        assert updated.description == "new"
        assert updated.is_premium is True
        assert updated.url == original_url
        assert updated.creator_id == creator_user.id

    async def test_update_ignores_null_premium_flag(self, db_session, creator_user, photo_factory):
        photo = await photo_factory(creator_user, is_premium=True, description="old")

        updated = await ContentStore(db_session).update(
            photo.id, creator_user.id, {"is_premium": None, "description": None}
        )

        assert updated.is_premium is True
        assert updated.description is None

    async def test_update_by_non_owner_forbidden(
        self, db_session, creator_user, second_creator, photo_factory
    ):
        photo = await photo_factory(creator_user)
        with pytest.raises(ForbiddenError):
            await ContentStore(db_session).update(photo.id, second_creator.id, {"is_premium": True})

    async def test_update_missing_photo(self, db_session, creator_user):
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).update(404, creator_user.id, {"description": "x"})

    async def test_delete_removes_likes_and_comments(
        self, db_session, creator_user, subscriber_user, photo_factory
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        await store.react(photo.id, subscriber_user.id)
        await store.annotate(photo.id, subscriber_user.id, "Nice")

        url = await store.delete(photo.id, creator_user.id)

        assert url == photo.url
        assert await db_session.get(Photo, photo.id) is None
        assert await db_session.scalar(select(func.count(PhotoLike.id))) == 0
        assert await db_session.scalar(select(func.count(PhotoComment.id))) == 0

    async def test_delete_by_non_owner_forbidden(
        self, db_session, creator_user, subscriber_user, photo_factory
    ):
        photo = await photo_factory(creator_user)
        with pytest.raises(ForbiddenError):
            await ContentStore(db_session).delete(photo.id, subscriber_user.id)

    async def test_list_by_owner_newest_first(
        self, db_session, creator_user, second_creator, photo_factory
    ):
        first = await photo_factory(creator_user)
        second = await photo_factory(creator_user, is_premium=True)
        await photo_factory(second_creator)

        photos = await ContentStore(db_session).list_by_owner(creator_user.id)

        assert [p.id for p in photos] == [second.id, first.id]


class TestLikes:
    """Tests for likes."""

    async def test_like_and_list(self, db_session, creator_user, subscriber_user, photo_factory):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)

        await store.react(photo.id, subscriber_user.id)
        await store.react(photo.id, creator_user.id)
        reactions = await store.list_reactions(photo.id)

        assert reactions["count"] == 2
        assert [like["user"]["id"] for like in reactions["likes"]] == [
            subscriber_user.id,
            creator_user.id,
        ]
        assert reactions["likes"][0]["user"]["name"] == "Fan"

    async def test_like_twice_conflicts(self, db_session, creator_user, subscriber_user, photo_factory):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        await store.react(photo.id, subscriber_user.id)

        with pytest.raises(ConflictError):
            await store.react(photo.id, subscriber_user.id)

    async def test_like_race_on_unique_constraint_conflicts(
        self, db_session, creator_user, subscriber_user, photo_factory, monkeypatch
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        photo_id, fan_id = photo.id, subscriber_user.id
        await store.react(photo_id, fan_id)
        await db_session.commit()

        real_execute = db_session.execute
        statements = []

        async def stale_first_execute(statement, *args, **kwargs):
            statements.append(statement)
            if len(statements) == 1:
                return MagicMock(scalar_one_or_none=MagicMock(return_value=None))
            return await real_execute(statement, *args, **kwargs)

        with monkeypatch.context() as patched:
            patched.setattr(db_session, "execute", stale_first_execute)
            with pytest.raises(ConflictError):
                await store.react(photo_id, fan_id)

        assert len(statements) == 1
        count = await db_session.scalar(select(func.count(PhotoLike.id)))
        assert count == 1

    async def test_like_missing_photo(self, db_session, subscriber_user):
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).react(777, subscriber_user.id)

    async def test_unlike(self, db_session, creator_user, subscriber_user, photo_factory):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        await store.react(photo.id, subscriber_user.id)

        await store.unreact(photo.id, subscriber_user.id)

        assert (await store.list_reactions(photo.id))["count"] == 0

    async def test_unlike_without_like(self, db_session, creator_user, subscriber_user, photo_factory):
        photo = await photo_factory(creator_user)
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).unreact(photo.id, subscriber_user.id)


class TestComments:
    """Tests for comments."""

    async def test_comment_is_stripped(self, db_session, creator_user, subscriber_user, photo_factory):
        photo = await photo_factory(creator_user)

        comment = await ContentStore(db_session).annotate(
            photo.id, subscriber_user.id, "  Great shot!  "
        )

        assert comment.content == "Great shot!"
        assert comment.user_id == subscriber_user.id

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_comment_rejected(
        self, db_session, creator_user, subscriber_user, photo_factory, text
    ):
        photo = await photo_factory(creator_user)
        with pytest.raises(InvalidInputError):
            await ContentStore(db_session).annotate(photo.id, subscriber_user.id, text)

    async def test_comment_on_missing_photo(self, db_session, subscriber_user):
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).annotate(555, subscriber_user.id, "hello")

    async def test_list_comments_newest_first(
        self, db_session, creator_user, subscriber_user, photo_factory
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        older = await store.annotate(photo.id, subscriber_user.id, "first")
        newer = await store.annotate(photo.id, creator_user.id, "second")

        comments = await store.list_annotations(photo.id)

        assert [c["id"] for c in comments] == [newer.id, older.id]
        assert comments[1]["user"]["id"] == subscriber_user.id
        assert "email" not in comments[1]["user"]
        assert comments[0]["photo_id"] == photo.id

    async def test_author_can_delete_comment(
        self, db_session, creator_user, subscriber_user, photo_factory
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        comment = await store.annotate(photo.id, subscriber_user.id, "mine")

        await store.delete_annotation(comment.id, subscriber_user.id)

        assert await store.list_annotations(photo.id) == []

    async def test_photo_owner_can_delete_comment(
        self, db_session, creator_user, subscriber_user, photo_factory
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        comment = await store.annotate(photo.id, subscriber_user.id, "moderate me")

        await store.delete_annotation(comment.id, creator_user.id)

        assert await store.list_annotations(photo.id) == []

    async def test_third_party_cannot_delete_comment(
        self, db_session, creator_user, subscriber_user, other_user, photo_factory
    ):
        store = ContentStore(db_session)
        photo = await photo_factory(creator_user)
        comment = await store.annotate(photo.id, subscriber_user.id, "keep")

        with pytest.raises(ForbiddenError):
            await store.delete_annotation(comment.id, other_user.id)

    async def test_delete_missing_comment(self, db_session, creator_user):
        with pytest.raises(NotFoundError):
            await ContentStore(db_session).delete_annotation(31337, creator_user.id)
