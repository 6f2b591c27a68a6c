"""Payment adapters for creator subscription checkout."""

from .stripe_adapter import (
    CheckoutSession,
    StripeAdapter,
    StripeAPIError,
    StripeAuthError,
    StripeError,
    StripeEvent,
    StripeWebhookError,
    create_stripe_adapter,
    get_stripe_adapter,
)

__all__ = [
    "StripeAdapter",
    "CheckoutSession",
    "StripeEvent",
    "StripeError",
    "StripeAPIError",
    "StripeWebhookError",
    "StripeAuthError",
    "create_stripe_adapter",
    "get_stripe_adapter",
]
