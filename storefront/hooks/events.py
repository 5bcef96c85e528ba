"""Typed webhook payloads, one model per event kind."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, ValidationError


PAYMENT_SUCCEEDED = "payment.succeeded"
SUBSCRIPTION_ACTIVE = "subscription.active"
SUBSCRIPTION_RENEWED = "subscription.renewed"
SUBSCRIPTION_CANCELLED = "subscription.cancelled"
SUBSCRIPTION_FAILED = "subscription.failed"


class WebhookPayloadError(Exception):
    """Raised when a payload for a known event kind does not match its schema."""


class Customer(BaseModel):
    customer_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class ProductCartItem(BaseModel):
    product_id: str
    quantity: int = 1


class PaymentData(BaseModel):
    payment_id: str
    product_id: Optional[str] = None
    product_cart: Optional[List[ProductCartItem]] = None
    subscription_id: Optional[str] = None
    total_amount: Optional[int] = None
    currency: Optional[str] = None
    customer: Optional[Customer] = None

    @property
    def customer_email(self) -> Optional[str]:
        return self.customer.email if self.customer else None

    @property
    def purchased_product_id(self) -> Optional[str]:
        if self.product_id:
            return self.product_id
        if self.product_cart:
            return self.product_cart[0].product_id
        return None


class SubscriptionData(BaseModel):
    subscription_id: str
    product_id: Optional[str] = None
    status: Optional[str] = None
    next_billing_date: Optional[datetime] = None
    recurring_pre_tax_amount: Optional[int] = None
    failure_reason: Optional[str] = None
    customer: Optional[Customer] = None

    @property
    def customer_email(self) -> Optional[str]:
        return self.customer.email if self.customer else None


class WebhookEvent(BaseModel):
    business_id: Optional[str] = None
    type: str
    timestamp: Optional[datetime] = None


class PaymentSucceededEvent(WebhookEvent):
    type: Literal["payment.succeeded"]
    data: PaymentData


class SubscriptionActiveEvent(WebhookEvent):
    type: Literal["subscription.active"]
    data: SubscriptionData


class SubscriptionRenewedEvent(WebhookEvent):
    type: Literal["subscription.renewed"]
    data: SubscriptionData


class SubscriptionCancelledEvent(WebhookEvent):
    type: Literal["subscription.cancelled"]
    data: SubscriptionData


class SubscriptionFailedEvent(WebhookEvent):
    type: Literal["subscription.failed"]
    data: SubscriptionData


class UnknownEvent(WebhookEvent):
    """Any kind we do not act on; the data is kept raw for logging."""

    model_config = ConfigDict(extra="allow")

    data: Dict[str, Any] = {}


KnownEvent = Union[
    PaymentSucceededEvent,
    SubscriptionActiveEvent,
    SubscriptionRenewedEvent,
    SubscriptionCancelledEvent,
    SubscriptionFailedEvent,
]
Event = Union[KnownEvent, UnknownEvent]

_EVENT_MODELS: Dict[str, Type[WebhookEvent]] = {
    PAYMENT_SUCCEEDED: PaymentSucceededEvent,
    SUBSCRIPTION_ACTIVE: SubscriptionActiveEvent,
    SUBSCRIPTION_RENEWED: SubscriptionRenewedEvent,
    SUBSCRIPTION_CANCELLED: SubscriptionCancelledEvent,
    SUBSCRIPTION_FAILED: SubscriptionFailedEvent,
}


def parse_event(payload: Mapping[str, Any]) -> Event:
    """Turn a verified payload into its typed variant.

    Unknown kinds come back as :class:`UnknownEvent`. A known kind with a
    payload that does not fit its model raises :class:`WebhookPayloadError`.
    """
    if not isinstance(payload, Mapping):
        raise WebhookPayloadError("payload must be a JSON object")
    kind = payload.get("type")
    if not isinstance(kind, str) or not kind.strip():
        raise WebhookPayloadError("payload is missing an event type")

    model = _EVENT_MODELS.get(kind, UnknownEvent)
    try:
        return model.model_validate(dict(payload))  # type: ignore[return-value]
    except ValidationError as exc:
        raise WebhookPayloadError(f"invalid {kind} payload: {exc.error_count()} error(s)") from exc


__all__ = [
    "PAYMENT_SUCCEEDED",
    "SUBSCRIPTION_ACTIVE",
    "SUBSCRIPTION_CANCELLED",
    "SUBSCRIPTION_FAILED",
    "SUBSCRIPTION_RENEWED",
    "Customer",
    "Event",
    "KnownEvent",
    "PaymentData",
    "PaymentSucceededEvent",
    "SubscriptionActiveEvent",
    "SubscriptionCancelledEvent",
    "SubscriptionData",
    "SubscriptionFailedEvent",
    "SubscriptionRenewedEvent",
    "UnknownEvent",
    "WebhookEvent",
    "WebhookPayloadError",
    "parse_event",
]
