"""
Access rules for gated content.

Pure functions with no I/O. Callers pass in the subscription facts they
already loaded; services/entitlements.py does the querying. Keeping the
rules here lets both the service and API layers share one definition.
"""

from collections.abc import Collection

# Number of public photos shown to viewers without access to a creator
PREVIEW_LIMIT = 3

# Length of one billing period for a subscription, in days
BILLING_PERIOD_DAYS = 30


def has_creator_access(
    viewer_id: int | None,
    creator_id: int,
    subscribed_creator_ids: Collection[int] = (),
) -> bool:
    """Whether the viewer sees everything a creator has published."""
    if viewer_id is None:
        return False
    return viewer_id == creator_id or creator_id in subscribed_creator_ids


def can_view(
    viewer_id: int | None,
    owner_id: int,
    is_premium: bool,
    subscribed_creator_ids: Collection[int] = (),
) -> bool:
    """
    Decide whether a viewer may see a single photo.

    Public photos are visible to everyone, anonymous viewers included.
    Premium photos are visible to their owner and to active subscribers
    of the owner.

    Args:
        viewer_id: Account id of the viewer, or None when anonymous
        owner_id: Account id of the photo's creator
        is_premium: Whether the photo is gated
        subscribed_creator_ids: Creators the viewer actively subscribes to

    Returns:
        True if the photo may be shown
    """
    if not is_premium:
        return True
    return has_creator_access(viewer_id, owner_id, subscribed_creator_ids)
