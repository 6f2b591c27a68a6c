"""
Payment request and response schemas.
"""

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """Checkout session request. Amount is in whole currency units."""

    creator_id: int = Field(..., gt=0)
    amount: int


class CheckoutResponse(BaseModel):
    session_id: str
    url: str


class WebhookResponse(BaseModel):
    """Acknowledgement returned to the payment provider."""

    received: bool = True
    status: str  # processed, ignored
