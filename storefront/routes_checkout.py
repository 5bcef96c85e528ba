import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from .checkout import build_checkout_url, resolve_return_url, with_email
from .config import get_settings
from .errors import error_response
from .provider import PaymentProviderClient


logger = logging.getLogger("storefront.checkout")

router = APIRouter(tags=["checkout"])


class CheckoutRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    email: Optional[str] = None


def _checkout_url(request: Request, product_id: str, email: Optional[str]) -> str:
    settings = get_settings()
    return_url = resolve_return_url(settings.return_url, str(request.base_url))
    return build_checkout_url(product_id, email, settings.environment, return_url)


@router.get("/checkout/{product_id}")
def checkout_redirect(product_id: str, request: Request, email: Optional[str] = None):
    """Send the browser to the hosted checkout page for `product_id`."""
    url = _checkout_url(request, product_id, email)
    logger.info("Redirecting to checkout product=%s url=%s", product_id, url)
    return RedirectResponse(url=url, status_code=302)


@router.get("/api/checkout")
def static_checkout(request: Request, product_id: str, email: Optional[str] = None):
    return {"checkout_url": _checkout_url(request, product_id, email)}


@router.post("/api/checkout")
def dynamic_checkout(payload: CheckoutRequest, request: Request):
    """Create a checkout session through the provider API.

    Provider failures surface as 502 through the installed ProviderError handler.
    """
    settings = get_settings()
    client = PaymentProviderClient.from_settings(settings)
    if client is None:
        return error_response(request, "service_unavailable", status_code=503, detail="DODO_PAYMENTS_API_KEY is not set")

    return_url = with_email(resolve_return_url(settings.return_url, str(request.base_url)), payload.email)
    checkout_url = client.create_checkout_session(
        payload.product_id,
        quantity=payload.quantity,
        email=payload.email,
        return_url=return_url,
    )
    logger.info("Created checkout session product=%s", payload.product_id)
    return {"checkout_url": checkout_url}
