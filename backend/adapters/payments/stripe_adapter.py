"""
Stripe Checkout adapter for one-off subscription payments.

Creates hosted Checkout sessions through the Stripe REST API and verifies
the signed webhook events Stripe sends back once a payment completes.
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

# Maximum age of a webhook timestamp, in seconds
DEFAULT_TOLERANCE = 300


# Custom Exceptions
class StripeError(Exception):
    """Base exception for Stripe adapter errors."""

    pass


class StripeAPIError(StripeError):
    """Raised when the Stripe API returns an error."""

    pass


class StripeWebhookError(StripeError):
    """Raised when webhook verification or parsing fails."""

    pass


class StripeAuthError(StripeError):
    """Raised when the secret key is missing or rejected."""

    pass


# Dataclasses
@dataclass
class CheckoutSession:
    """Stripe Checkout session information."""

    id: str
    url: str
    amount_total: int | None = None
    currency: str | None = None
    payment_status: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CheckoutSession":
        """Create session from API response data."""
        return cls(
            id=data.get("id", ""),
            url=data.get("url") or "",
            amount_total=data.get("amount_total"),
            currency=data.get("currency"),
            payment_status=data.get("payment_status"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class StripeEvent:
    """Stripe webhook event data."""

    id: str
    type: str  # checkout.session.completed, payment_intent.succeeded, etc.
    data_object: dict[str, Any]
    created: int | None = None

    @property
    def metadata(self) -> dict[str, Any]:
        return self.data_object.get("metadata") or {}

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> "StripeEvent":
        """Create event from webhook payload."""
        return cls(
            id=payload.get("id", ""),
            type=payload.get("type", ""),
            data_object=(payload.get("data") or {}).get("object") or {},
            created=payload.get("created"),
        )


def _encode_form(params: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested params into Stripe's bracketed form encoding."""
    items: list[tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, dict):
            items.extend(_encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            for index, element in enumerate(value):
                element_name = f"{name}[{index}]"
                if isinstance(element, dict):
                    items.extend(_encode_form(element, element_name))
                else:
                    items.append((element_name, str(element)))
        elif isinstance(value, bool):
            items.append((name, "true" if value else "false"))
        elif value is not None:
            items.append((name, str(value)))
    return items


class StripeAdapter:
    """
    Stripe API adapter for Checkout payments.

    Provides checkout session creation, webhook signature verification and
    event parsing.
    """

    API_BASE_URL = "https://api.stripe.com/v1"

    def __init__(
        self,
        secret_key: str | None = None,
        webhook_secret: str | None = None,
        currency: str | None = None,
        tolerance: int = DEFAULT_TOLERANCE,
    ):
        """
        Initialize Stripe adapter.

        Args:
            secret_key: Stripe secret API key (defaults to settings)
            webhook_secret: Webhook signing secret (defaults to settings)
            currency: ISO currency code for sessions (defaults to settings)
            tolerance: Maximum webhook timestamp age in seconds
        """
        self.secret_key = secret_key or settings.stripe_secret_key
        self.webhook_secret = webhook_secret or settings.stripe_webhook_secret
        self.currency = currency or settings.stripe_currency
        self.tolerance = tolerance

        if not self.secret_key:
            logger.warning("Stripe secret key not configured. Set stripe_secret_key in settings.")

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers for API requests."""
        if not self.secret_key:
            raise StripeAuthError(
                "Stripe secret key not configured. Set stripe_secret_key in settings."
            )

        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make HTTP request to the Stripe API.

        Args:
            method: HTTP method (GET or POST)
            endpoint: API endpoint path
            data: Form parameters for POST requests

        Returns:
            API response as dictionary

        Raises:
            StripeAuthError: If the key is missing or rejected
            StripeAPIError: If the API request fails
        """
        url = f"{self.API_BASE_URL}/{endpoint}"
        headers = self._get_headers()

        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                logger.info("Making %s request to %s", method, endpoint)

                if method == "GET":
                    response = await client.get(url, headers=headers)
                elif method == "POST":
                    response = await client.post(
                        url, headers=headers, data=dict(_encode_form(data or {}))
                    )
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")

                response.raise_for_status()
                return response.json()

        except httpx.HTTPStatusError as e:
            error_detail = str(e)
            try:
                error_detail = e.response.json().get("error", {}).get("message", error_detail)
            except ValueError:
                pass

            logger.error("Stripe API error: %s", error_detail)
            if e.response.status_code == 401:
                raise StripeAuthError(f"Authentication failed: {error_detail}")
            raise StripeAPIError(f"API request failed: {error_detail}")
        except httpx.RequestError as e:
            logger.error("HTTP request error: %s", e)
            raise StripeAPIError(f"Request failed: {e}")

    async def create_checkout_session(
        self,
        creator_id: int,
        subscriber_id: int,
        amount: int,
        success_url: str | None = None,
        cancel_url: str | None = None,
        product_name: str = "Creator Subscription",
    ) -> CheckoutSession:
        """
        Create a hosted Checkout session for a one-off payment.

        Args:
            creator_id: Creator being paid
            subscriber_id: Account paying
            amount: Price in whole currency units
            success_url: Redirect after payment (defaults to settings)
            cancel_url: Redirect on cancel (defaults to settings)
            product_name: Line item label shown on the Checkout page

        Returns:
            CheckoutSession with the hosted page url
        """
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": product_name},
                        "unit_amount": amount * 100,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": success_url or settings.payment_success_url,
            "cancel_url": cancel_url or settings.payment_cancel_url,
            "client_reference_id": str(subscriber_id),
            "metadata": {
                "creatorId": str(creator_id),
                "subscriberId": str(subscriber_id),
            },
        }

        data = await self._make_request("POST", "checkout/sessions", params)
        session = CheckoutSession.from_api_response(data)
        logger.info(
            "Created checkout session %s",
            session.id,
            extra={"creator_id": creator_id, "subscriber_id": subscriber_id},
        )
        return session

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature_header: str,
        now: float | None = None,
    ) -> bool:
        """
        Verify a Stripe-Signature header using HMAC SHA256.

        The header carries a timestamp ``t`` and one or more ``v1``
        signatures over ``"{t}.{payload}"``. Timestamps older than the
        tolerance are rejected.

        Args:
            payload: Raw webhook body
            signature_header: Value of the Stripe-Signature header
            now: Current unix time, for testing

        Returns:
            True if signature is valid, False otherwise

        Raises:
            StripeWebhookError: If webhook secret not configured
        """
        if not self.webhook_secret:
            raise StripeWebhookError(
                "Webhook secret not configured. Set stripe_webhook_secret in settings."
            )

        timestamp = None
        signatures = []
        for part in (signature_header or "").split(","):
            key, _, value = part.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)

        if not timestamp or not signatures:
            logger.warning("Webhook signature header malformed")
            return False

        try:
            timestamp_value = int(timestamp)
        except ValueError:
            logger.warning("Webhook signature timestamp is not an integer")
            return False

        current = time.time() if now is None else now
        if abs(current - timestamp_value) > self.tolerance:
            logger.warning("Webhook timestamp outside tolerance")
            return False

        signed_payload = timestamp.encode("utf-8") + b"." + payload
        expected_signature = hmac.new(
            key=self.webhook_secret.encode("utf-8"),
            msg=signed_payload,
            digestmod=hashlib.sha256,
        ).hexdigest()

        is_valid = any(hmac.compare_digest(expected_signature, sig) for sig in signatures)
        if is_valid:
            logger.info("Webhook signature verified successfully")
        else:
            logger.warning("Webhook signature verification failed")
        return is_valid

    def parse_webhook_event(self, payload: dict[str, Any]) -> StripeEvent:
        """
        Parse webhook payload into a StripeEvent.

        Raises:
            StripeWebhookError: If the payload is not an event object
        """
        if not isinstance(payload, dict) or not payload.get("type"):
            raise StripeWebhookError("Failed to parse webhook event: missing type")
        event = StripeEvent.from_webhook_payload(payload)
        logger.info("Parsed webhook event: %s", event.type)
        return event


# Factory function for easy instantiation
def create_stripe_adapter(
    secret_key: str | None = None,
    webhook_secret: str | None = None,
) -> StripeAdapter:
    """
    Create a Stripe adapter instance.

    Args:
        secret_key: Stripe secret key (defaults to settings)
        webhook_secret: Webhook signing secret (defaults to settings)

    Returns:
        StripeAdapter instance
    """
    return StripeAdapter(secret_key=secret_key, webhook_secret=webhook_secret)


def get_stripe_adapter() -> StripeAdapter:
    """FastAPI dependency returning a Stripe adapter built from settings."""
    return create_stripe_adapter()
