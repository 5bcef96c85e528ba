"""Hosted-checkout URL composition."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from .config import LIVE_MODE


LIVE_CHECKOUT_ORIGIN = "https://checkout.dodopayments.com/buy"
TEST_CHECKOUT_ORIGIN = "https://test.checkout.dodopayments.com/buy"


def checkout_origin(environment: Optional[str]) -> str:
    return LIVE_CHECKOUT_ORIGIN if environment == LIVE_MODE else TEST_CHECKOUT_ORIGIN


def resolve_return_url(configured: Optional[str], request_base_url: str) -> str:
    """Use the configured return URL, else ``<request origin>/success``."""
    if configured and configured.strip():
        return configured.strip()
    return request_base_url.rstrip("/") + "/success"


def with_email(url: str, email: Optional[str]) -> str:
    """Append ``email`` to the query of ``url``, keeping any existing parameters."""
    if not email:
        return url
    parts = urlsplit(url)
    extra = urlencode([("email", email)])
    # existing query kept verbatim so its encodings survive
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def build_checkout_url(
    product_id: str,
    email: Optional[str],
    environment: Optional[str],
    return_url: str,
) -> str:
    """Build the hosted checkout link for ``product_id``.

    The email rides along twice: as a checkout parameter (prefills the form)
    and on the return URL, so the success page still knows who paid.
    """
    params = [
        ("quantity", "1"),
        ("redirect_url", with_email(return_url, email)),
    ]
    if email:
        params.append(("email", email))
    path = quote(product_id, safe="")
    return f"{checkout_origin(environment)}/{path}?{urlencode(params, quote_via=quote)}"


__all__ = [
    "LIVE_CHECKOUT_ORIGIN",
    "TEST_CHECKOUT_ORIGIN",
    "build_checkout_url",
    "checkout_origin",
    "resolve_return_url",
    "with_email",
]
