import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type

from ..entitlements import EntitlementStore
from .events import (
    Event,
    PaymentSucceededEvent,
    SubscriptionActiveEvent,
    SubscriptionCancelledEvent,
    SubscriptionFailedEvent,
    SubscriptionRenewedEvent,
    WebhookEvent,
)


logger = logging.getLogger("storefront.webhooks")


@dataclass
class DispatchResult:
    event_type: str
    handled: bool
    email: Optional[str] = None
    reason: Optional[str] = None


def _applied(event: WebhookEvent, email: str, applied: bool) -> DispatchResult:
    # status changes only land on a customer that already has a subscription
    if applied:
        return DispatchResult(event.type, True, email=email)
    return DispatchResult(event.type, False, email=email, reason="unknown_customer")


def _on_payment_succeeded(store: EntitlementStore, event: PaymentSucceededEvent) -> DispatchResult:
    data = event.data
    email = data.customer_email
    product_id = data.purchased_product_id
    logger.info("Payment succeeded payment=%s product=%s amount=%s", data.payment_id, product_id, data.total_amount)
    if not email:
        return DispatchResult(event.type, False, reason="missing_email")
    if not product_id:
        return DispatchResult(event.type, False, email=email, reason="missing_product")
    store.record_purchase(
        email,
        data.payment_id,
        product_id,
        data.total_amount,
        data.currency,
        event.timestamp,
    )
    return DispatchResult(event.type, True, email=email)


def _on_subscription_active(store: EntitlementStore, event: SubscriptionActiveEvent) -> DispatchResult:
    data = event.data
    email = data.customer_email
    logger.info("Subscription activated subscription=%s product=%s", data.subscription_id, data.product_id)
    if not email:
        return DispatchResult(event.type, False, reason="missing_email")
    store.activate_subscription(
        email,
        data.subscription_id,
        data.product_id,
        data.next_billing_date,
        data.recurring_pre_tax_amount,
        event.timestamp,
    )
    return DispatchResult(event.type, True, email=email)


def _on_subscription_renewed(store: EntitlementStore, event: SubscriptionRenewedEvent) -> DispatchResult:
    email = event.data.customer_email
    if not email:
        return DispatchResult(event.type, False, reason="missing_email")
    applied = store.renew_subscription(email, event.data.next_billing_date)
    return _applied(event, email, applied)


def _on_subscription_cancelled(store: EntitlementStore, event: SubscriptionCancelledEvent) -> DispatchResult:
    email = event.data.customer_email
    if not email:
        return DispatchResult(event.type, False, reason="missing_email")
    applied = store.mark_subscription_cancelled(email)
    return _applied(event, email, applied)


def _on_subscription_failed(store: EntitlementStore, event: SubscriptionFailedEvent) -> DispatchResult:
    email = event.data.customer_email
    if not email:
        return DispatchResult(event.type, False, reason="missing_email")
    applied = store.mark_subscription_failed(email, event.data.failure_reason)
    return _applied(event, email, applied)


_HANDLERS: Dict[Type[WebhookEvent], Callable[[EntitlementStore, WebhookEvent], DispatchResult]] = {
    PaymentSucceededEvent: _on_payment_succeeded,  # type: ignore[dict-item]
    SubscriptionActiveEvent: _on_subscription_active,  # type: ignore[dict-item]
    SubscriptionRenewedEvent: _on_subscription_renewed,  # type: ignore[dict-item]
    SubscriptionCancelledEvent: _on_subscription_cancelled,  # type: ignore[dict-item]
    SubscriptionFailedEvent: _on_subscription_failed,  # type: ignore[dict-item]
}


def dispatch_event(store: EntitlementStore, event: Event) -> DispatchResult:
    """Apply a verified event to the store.

    Unknown kinds and events without a customer email are logged and skipped.
    Nothing here retries or reorders; redelivery is the provider's job.
    """
    logger.info("Webhook event type=%s", event.type)
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.info("Unhandled webhook event type=%s", event.type)
        return DispatchResult(event.type, False, reason="unhandled")

    result = handler(store, event)
    if not result.handled:
        logger.warning("Skipped webhook event type=%s reason=%s", event.type, result.reason)
    return result


__all__ = ["DispatchResult", "dispatch_event"]
