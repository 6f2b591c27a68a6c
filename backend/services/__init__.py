"""
Service layer for business logic.
"""

from services.accounts import AccountService, author_summary, user_summary
from services.checkout import CheckoutService
from services.content_store import ContentStore
from services.entitlements import CreatorPhotos, EntitlementService
from services.subscription_ledger import SubscriptionLedger

__all__ = [
    "AccountService",
    "CheckoutService",
    "ContentStore",
    "CreatorPhotos",
    "EntitlementService",
    "SubscriptionLedger",
    "author_summary",
    "user_summary",
]
