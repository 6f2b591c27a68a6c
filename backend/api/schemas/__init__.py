"""
API request and response schemas.
"""

from .auth import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from .payment import CheckoutRequest, CheckoutResponse, WebhookResponse
from .photo import (
    CommentRequest,
    CommentResponse,
    CreatorPhotosResponse,
    LikesResponse,
    MessageResponse,
    PhotoResponse,
    PhotoUpdateRequest,
)
from .subscription import (
    MySubscriberItem,
    MySubscriptionItem,
    SubscribeRequest,
    SubscriptionCheckResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from .user import (
    AuthorSummary,
    BecomeCreatorRequest,
    CreatorListItem,
    CreatorProfileResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    UserSummary,
)

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "UserResponse",
    "AuthorSummary",
    "UserSummary",
    "ProfileUpdateRequest",
    "PasswordChangeRequest",
    "BecomeCreatorRequest",
    "CreatorListItem",
    "CreatorProfileResponse",
    "PhotoResponse",
    "PhotoUpdateRequest",
    "CreatorPhotosResponse",
    "LikesResponse",
    "CommentRequest",
    "CommentResponse",
    "MessageResponse",
    "SubscribeRequest",
    "SubscriptionResponse",
    "MySubscriptionItem",
    "MySubscriberItem",
    "SubscriptionCheckResponse",
    "SubscriptionStatusResponse",
    "CheckoutRequest",
    "CheckoutResponse",
    "WebhookResponse",
]
