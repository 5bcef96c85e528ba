"""Thin Dodo Payments REST client used by the landing page and dynamic checkout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .config import LIVE_MODE, Settings


logger = logging.getLogger("storefront.provider")

LIVE_API_BASE = "https://live.dodopayments.com"
TEST_API_BASE = "https://test.dodopayments.com"

FALLBACK_DETAILS = "Your purchase is being processed. You will receive an email confirmation shortly."


class ProviderError(Exception):
    """Raised for any failed provider call: transport, timeout, status or body."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def api_base_url(environment: Optional[str]) -> str:
    return LIVE_API_BASE if environment == LIVE_MODE else TEST_API_BASE


class PaymentProviderClient:
    """Synchronous, time-bounded calls to the provider API. No retries."""

    def __init__(
        self,
        api_key: str,
        *,
        environment: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = api_base_url(environment)
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["PaymentProviderClient"]:
        if not settings.api_key:
            return None
        return cls(settings.api_key, environment=settings.environment, timeout=settings.provider_timeout)

    def _request(self, method: str, path: str, *, json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = client.request(method, path, headers=headers, json=json_body)
        except httpx.TimeoutException as exc:
            raise ProviderError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"{method} {path} failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise ProviderError(f"{method} {path} returned {resp.status_code}", status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise ProviderError(f"{method} {path} returned a non-JSON body", status_code=resp.status_code) from exc
        if not isinstance(body, dict):
            raise ProviderError(f"{method} {path} returned an unexpected body", status_code=resp.status_code)
        return body

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/payments/{quote(payment_id, safe='')}")

    def get_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/subscriptions/{quote(subscription_id, safe='')}")

    def create_checkout_session(
        self,
        product_id: str,
        *,
        quantity: int = 1,
        email: Optional[str] = None,
        return_url: Optional[str] = None,
    ) -> str:
        """Create a hosted checkout session and return its URL."""
        payload: Dict[str, Any] = {"product_cart": [{"product_id": product_id, "quantity": quantity}]}
        if email:
            payload["customer"] = {"email": email}
        if return_url:
            payload["return_url"] = return_url
        body = self._request("POST", "/checkouts", json_body=payload)
        checkout_url = body.get("checkout_url")
        if not isinstance(checkout_url, str) or not checkout_url:
            raise ProviderError("POST /checkouts returned no checkout_url")
        return checkout_url


@dataclass(frozen=True)
class PurchaseSummary:
    details: str
    product_id: Optional[str] = None
    customer_email: Optional[str] = None
    kind: Optional[str] = None
    from_provider: bool = False


FALLBACK_SUMMARY = PurchaseSummary(details=FALLBACK_DETAILS)


def _customer_email(body: Dict[str, Any]) -> Optional[str]:
    customer = body.get("customer")
    if isinstance(customer, dict):
        email = customer.get("email")
        if isinstance(email, str) and email.strip():
            return email
    return None


def _first_product_id(body: Dict[str, Any]) -> Optional[str]:
    product_id = body.get("product_id")
    if isinstance(product_id, str) and product_id:
        return product_id
    for key in ("product_cart", "line_items"):
        items = body.get(key)
        if isinstance(items, list) and items and isinstance(items[0], dict):
            value = items[0].get("product_id")
            if isinstance(value, str) and value:
                return value
    return None


def describe_purchase(
    client: Optional[PaymentProviderClient],
    *,
    payment_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
) -> PurchaseSummary:
    """Look up what was just bought, for display only.

    Returns :data:`FALLBACK_SUMMARY` when there is nothing to look up, no
    client is configured, or the provider call fails.
    """
    if client is None or not (payment_id or subscription_id):
        return FALLBACK_SUMMARY

    try:
        if subscription_id:
            body = client.get_subscription(subscription_id)
            product_id = _first_product_id(body)
            return PurchaseSummary(
                details=f"Your subscription for Product ID {product_id or 'your product'} is now active!",
                product_id=product_id,
                customer_email=_customer_email(body),
                kind="subscription",
                from_provider=True,
            )
        body = client.get_payment(payment_id or "")
        product_id = _first_product_id(body)
        return PurchaseSummary(
            details=f"Your purchase of Product ID {product_id or 'your product'} was successful!",
            product_id=product_id,
            customer_email=_customer_email(body),
            kind="payment",
            from_provider=True,
        )
    except ProviderError as exc:
        logger.warning("Provider lookup failed payment=%s subscription=%s err=%s", payment_id, subscription_id, exc)
        return FALLBACK_SUMMARY


__all__ = [
    "FALLBACK_SUMMARY",
    "LIVE_API_BASE",
    "TEST_API_BASE",
    "PaymentProviderClient",
    "ProviderError",
    "PurchaseSummary",
    "api_base_url",
    "describe_purchase",
]
