"""
Unit tests for the entitlement service.

Scenario accounts: creator A (creator_user), subscriber B
(subscriber_user), non-subscriber C (other_user).
"""

import pytest

from core.exceptions import ForbiddenError, NotFoundError
from services.entitlements import EntitlementService
from services.subscription_ledger import SubscriptionLedger

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def gallery(creator_user, photo_factory):
    """Two public and two premium photos owned by the creator."""
    return {
        "public": [await photo_factory(creator_user), await photo_factory(creator_user)],
        "premium": [
            await photo_factory(creator_user, is_premium=True),
            await photo_factory(creator_user, is_premium=True),
        ],
    }


class TestSinglePhoto:
    """Tests for single-photo visibility."""

    async def test_subscriber_sees_premium(
        self, db_session, creator_user, subscriber_user, subscription_factory, gallery
    ):
        await subscription_factory(subscriber_user, creator_user)
        photo = gallery["premium"][0]

        loaded = await EntitlementService(db_session).get_photo_for_viewer(
            photo.id, subscriber_user.id
        )

        assert loaded.id == photo.id

    async def test_non_subscriber_denied_premium(self, db_session, other_user, gallery):
        with pytest.raises(ForbiddenError):
            await EntitlementService(db_session).get_photo_for_viewer(
                gallery["premium"][0].id, other_user.id
            )

    async def test_anonymous_denied_premium(self, db_session, gallery):
        with pytest.raises(ForbiddenError):
            await EntitlementService(db_session).get_photo_for_viewer(
                gallery["premium"][0].id, None
            )

    async def test_owner_sees_own_premium(self, db_session, creator_user, gallery):
        service = EntitlementService(db_session)
        assert await service.can_view(creator_user.id, gallery["premium"][0]) is True

    async def test_anonymous_sees_public(self, db_session, gallery):
        photo = await EntitlementService(db_session).get_photo_for_viewer(
            gallery["public"][0].id, None
        )
        assert photo.is_premium is False

    async def test_missing_photo(self, db_session, other_user):
        with pytest.raises(NotFoundError):
            await EntitlementService(db_session).get_photo_for_viewer(4242, other_user.id)

    async def test_access_revoked_after_unsubscribe(
        self, db_session, creator_user, subscriber_user, gallery
    ):
        ledger = SubscriptionLedger(db_session)
        service = EntitlementService(db_session)
        premium = gallery["premium"][0]

        await ledger.subscribe(subscriber_user.id, creator_user.id)
        assert await service.can_view(subscriber_user.id, premium) is True

        await ledger.unsubscribe(subscriber_user.id, creator_user.id)
        assert await service.can_view(subscriber_user.id, premium) is False


class TestAccessiblePhotos:
    """Tests for the listing filter."""

    async def test_anonymous_gets_public_only(self, db_session, gallery):
        photos = await EntitlementService(db_session).accessible_photos(None)
        assert {p.id for p in photos} == {p.id for p in gallery["public"]}

    async def test_subscriber_gets_everything(
        self, db_session, creator_user, subscriber_user, subscription_factory, gallery
    ):
        await subscription_factory(subscriber_user, creator_user)

        photos = await EntitlementService(db_session).accessible_photos(subscriber_user.id)

        assert len(photos) == 4
        assert [p.id for p in photos] == sorted(p.id for p in photos)

    async def test_non_subscriber_gets_public_and_own(
        self, db_session, creator_user, second_creator, photo_factory, gallery
    ):
        own_premium = await photo_factory(second_creator, is_premium=True)

        photos = await EntitlementService(db_session).accessible_photos(second_creator.id)
        ids = {p.id for p in photos}

        assert own_premium.id in ids
        assert {p.id for p in gallery["public"]} <= ids
        assert not ids & {p.id for p in gallery["premium"]}

    async def test_subscribed_feed_newest_first(
        self, db_session, creator_user, second_creator, subscriber_user,
        subscription_factory, photo_factory, gallery
    ):
        await subscription_factory(subscriber_user, creator_user)
        await photo_factory(second_creator)

        feed = await EntitlementService(db_session).subscribed_feed(subscriber_user.id)

        assert {p.creator_id for p in feed} == {creator_user.id}
        assert feed[0].id == gallery["premium"][-1].id
        assert len(feed) == 4

    async def test_subscribed_feed_empty_without_subscriptions(self, db_session, other_user, gallery):
        assert await EntitlementService(db_session).subscribed_feed(other_user.id) == []


class TestCreatorGallery:
    """Tests for a creator's gallery as seen by different viewers."""

    async def test_subscriber_gets_full_gallery(
        self, db_session, creator_user, subscriber_user, subscription_factory, gallery
    ):
        await subscription_factory(subscriber_user, creator_user)

        result = await EntitlementService(db_session).creator_photos(
            creator_user.id, subscriber_user.id
        )

        assert result.has_access is True
        assert result.total_count == 4
        assert result.premium_count == 2
        assert len(result.premium_photos) == 2
        assert len(result.public_photos) == 2
        assert result.preview_count is None

    async def test_owner_gets_full_gallery(self, db_session, creator_user, gallery):
        result = await EntitlementService(db_session).creator_photos(
            creator_user.id, creator_user.id
        )
        assert result.has_access is True
        assert len(result.photos) == 4

    async def test_non_subscriber_gets_public_preview(
        self, db_session, creator_user, other_user, gallery
    ):
        result = await EntitlementService(db_session).creator_photos(creator_user.id, other_user.id)

        assert result.has_access is False
        assert result.premium_photos == []
        assert all(not p.is_premium for p in result.photos)
        assert result.preview_count == 2
        assert result.total_count == 4
        assert result.premium_count == 2

    async def test_preview_capped_at_three(self, db_session, creator_user, photo_factory):
        for _ in range(5):
            await photo_factory(creator_user)
        await photo_factory(creator_user, is_premium=True)

        result = await EntitlementService(db_session).creator_photos(creator_user.id, None)

        assert result.preview_count == 3
        assert len(result.photos) == 3
        assert result.total_count == 6
        assert result.premium_count == 1

    async def test_preview_of_empty_gallery(self, db_session, creator_user):
        result = await EntitlementService(db_session).creator_photos(creator_user.id, None)
        assert result.total_count == 0
        assert result.premium_count == 0
        assert result.preview_count == 0

    async def test_unknown_creator(self, db_session, other_user):
        with pytest.raises(NotFoundError):
            await EntitlementService(db_session).creator_photos(other_user.id, None)
