import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter

from .config import get_settings
from .pages import failure_page, success_page
from .provider import PaymentProviderClient, describe_purchase


logger = logging.getLogger("storefront.success")

router = APIRouter(tags=["checkout"])

SUCCESS_STATUSES = {"succeeded", "active"}


@router.get("/success")
def checkout_success(
    status: Optional[str] = None,
    email: Optional[str] = None,
    payment_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
):
    """Landing page after checkout. Access itself is granted by the webhook."""
    if status not in SUCCESS_STATUSES:
        logger.info("Checkout returned unsuccessful status=%s", status)
        return failure_page(status)

    client = PaymentProviderClient.from_settings(get_settings())
    summary = describe_purchase(client, payment_id=payment_id, subscription_id=subscription_id)

    customer_email = email or summary.customer_email or "your email"
    access_href = f"/?email={quote(customer_email, safe='')}"
    return success_page(summary, customer_email, access_href)
