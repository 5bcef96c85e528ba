"""In-memory entitlement store fed by payment webhooks.

Each customer (keyed by the raw email string, no normalization) owns at most
one subscription record and an append-only list of one-time purchases. Writes
come only from verified webhook events and follow last-write-wins semantics:
there is no ordering or idempotency guard, so a replayed ``payment_id`` adds a
second purchase and a late ``subscription.active`` overwrites a newer record.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Protocol


logger = logging.getLogger("storefront.entitlements")


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    FAILED = "failed"


class AccessType(str, Enum):
    SUBSCRIPTION = "subscription"
    PRODUCT = "product"


@dataclass
class SubscriptionRecord:
    subscription_id: str
    product_id: Optional[str]
    status: SubscriptionStatus
    next_billing_date: Optional[datetime]
    activated_at: datetime
    recurring_amount: Optional[int]
    failure_reason: Optional[str] = None
    last_renewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class PurchaseRecord:
    payment_id: str
    product_id: str
    purchased_at: datetime
    amount: Optional[int]
    currency: Optional[str]


@dataclass(frozen=True)
class EntitlementView:
    email: str
    subscription: Optional[SubscriptionRecord] = None
    purchases: List[PurchaseRecord] = field(default_factory=list)
    has_active_access: bool = False
    access_type: List[AccessType] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        """JSON-friendly shape used by the access API."""
        return {
            "email": self.email,
            "subscriptions": self.subscription,
            "products": list(self.purchases),
            "hasActiveAccess": self.has_active_access,
            "accessType": [item.value for item in self.access_type],
        }


class EntitlementBackend(Protocol):
    """Storage behind :class:`EntitlementStore`.

    Backends hold data only; the store serializes access to them.
    """

    def get_subscription(self, email: str) -> Optional[SubscriptionRecord]:
        ...

    def put_subscription(self, email: str, record: SubscriptionRecord) -> None:
        ...

    def list_purchases(self, email: str) -> List[PurchaseRecord]:
        ...

    def append_purchase(self, email: str, record: PurchaseRecord) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryEntitlementBackend:
    """Process-local dictionaries; everything is lost on restart."""

    def __init__(self) -> None:
        self._subscriptions: Dict[str, SubscriptionRecord] = {}
        self._purchases: Dict[str, List[PurchaseRecord]] = {}

    def get_subscription(self, email: str) -> Optional[SubscriptionRecord]:
        return self._subscriptions.get(email)

    def put_subscription(self, email: str, record: SubscriptionRecord) -> None:
        self._subscriptions[email] = record

    def list_purchases(self, email: str) -> List[PurchaseRecord]:
        return list(self._purchases.get(email, ()))

    def append_purchase(self, email: str, record: PurchaseRecord) -> None:
        self._purchases.setdefault(email, []).append(record)

    def clear(self) -> None:
        self._subscriptions.clear()
        self._purchases.clear()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntitlementStore:
    def __init__(self, backend: Optional[EntitlementBackend] = None) -> None:
        self._backend: EntitlementBackend = backend if backend is not None else InMemoryEntitlementBackend()
        self._lock = threading.Lock()

    def record_purchase(
        self,
        email: str,
        payment_id: str,
        product_id: str,
        amount: Optional[int],
        currency: Optional[str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """Append a one-time purchase. Duplicate ``payment_id`` values are kept."""
        record = PurchaseRecord(
            payment_id=payment_id,
            product_id=product_id,
            purchased_at=timestamp or _utcnow(),
            amount=amount,
            currency=currency,
        )
        with self._lock:
            self._backend.append_purchase(email, record)
        logger.info("Product access granted to %s product=%s payment=%s", email, product_id, payment_id)

    def activate_subscription(
        self,
        email: str,
        subscription_id: str,
        product_id: Optional[str],
        next_billing_date: Optional[datetime],
        recurring_amount: Optional[int],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """Replace the customer's subscription with a fresh active record."""
        record = SubscriptionRecord(
            subscription_id=subscription_id,
            product_id=product_id,
            status=SubscriptionStatus.ACTIVE,
            next_billing_date=next_billing_date,
            activated_at=timestamp or _utcnow(),
            recurring_amount=recurring_amount,
        )
        with self._lock:
            self._backend.put_subscription(email, record)
        logger.info("Subscription %s activated for %s", subscription_id, email)

    def renew_subscription(self, email: str, next_billing_date: Optional[datetime]) -> bool:
        """Reactivate and move the billing date. Returns False for unknown customers."""
        with self._lock:
            record = self._backend.get_subscription(email)
            if record is None:
                logger.info("Ignoring renewal for unknown customer %s", email)
                return False
            record.status = SubscriptionStatus.ACTIVE
            record.next_billing_date = next_billing_date
            record.last_renewed_at = _utcnow()
            self._backend.put_subscription(email, record)
        logger.info("Subscription renewed for %s", email)
        return True

    def mark_subscription_cancelled(self, email: str) -> bool:
        return self._set_status(email, SubscriptionStatus.CANCELLED)

    def mark_subscription_failed(self, email: str, reason: Optional[str] = None) -> bool:
        return self._set_status(email, SubscriptionStatus.FAILED, reason=reason)

    def _set_status(self, email: str, status: SubscriptionStatus, *, reason: Optional[str] = None) -> bool:
        with self._lock:
            record = self._backend.get_subscription(email)
            if record is None:
                logger.info("Ignoring %s status for unknown customer %s", status.value, email)
                return False
            record.status = status
            if status is SubscriptionStatus.FAILED:
                record.failure_reason = reason
            self._backend.put_subscription(email, record)
        logger.info("Subscription for %s marked %s", email, status.value)
        return True

    def get_subscription(self, email: str) -> Optional[SubscriptionRecord]:
        with self._lock:
            record = self._backend.get_subscription(email)
            return replace(record) if record is not None else None

    def get_purchases(self, email: str) -> List[PurchaseRecord]:
        with self._lock:
            return self._backend.list_purchases(email)

    def get_entitlement(self, email: str) -> EntitlementView:
        """Derive the access view for ``email``. Unknown emails get an empty view."""
        with self._lock:
            record = self._backend.get_subscription(email)
            subscription = replace(record) if record is not None else None
            purchases = self._backend.list_purchases(email)

        access: List[AccessType] = []
        if subscription is not None and subscription.status is SubscriptionStatus.ACTIVE:
            access.append(AccessType.SUBSCRIPTION)
        if purchases:
            access.append(AccessType.PRODUCT)
        return EntitlementView(
            email=email,
            subscription=subscription,
            purchases=purchases,
            has_active_access=bool(access),
            access_type=access,
        )

    def clear(self) -> None:
        with self._lock:
            self._backend.clear()


_STORE: Optional[EntitlementStore] = None
_STORE_LOCK = threading.Lock()


def get_store() -> EntitlementStore:
    """Return the process-wide store, creating it on first use."""
    global _STORE
    with _STORE_LOCK:
        if _STORE is None:
            _STORE = EntitlementStore()
        return _STORE


def set_store(store: Optional[EntitlementStore]) -> None:
    """Swap the process-wide store (``None`` resets to a fresh in-memory one on next use)."""
    global _STORE
    with _STORE_LOCK:
        _STORE = store


__all__ = [
    "AccessType",
    "EntitlementBackend",
    "EntitlementStore",
    "EntitlementView",
    "InMemoryEntitlementBackend",
    "PurchaseRecord",
    "SubscriptionRecord",
    "SubscriptionStatus",
    "get_store",
    "set_store",
]
