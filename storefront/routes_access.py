"""Access checks: the HTML home page and the JSON access API."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends

from .config import get_settings
from .entitlements import EntitlementStore, get_store
from .pages import access_page, buy_page, prompt_page


logger = logging.getLogger("storefront.access")

router = APIRouter(tags=["access"])


@router.get("/")
def home(email: Optional[str] = None, store: EntitlementStore = Depends(get_store)):
    """Ask for an email, then show what that email can access or offer the product."""
    if not email:
        return prompt_page()

    view = store.get_entitlement(email)
    if view.has_active_access:
        return access_page(view)

    product_id = get_settings().default_product_id
    checkout_href = f"/checkout/{quote(product_id, safe='')}?email={quote(email, safe='')}"
    return buy_page(email, checkout_href)


@router.get("/api/user/{email}")
@router.get("/api/user/{email}/access")
def user_access(email: str, store: EntitlementStore = Depends(get_store)):
    view = store.get_entitlement(email)
    logger.debug("Access check for %s -> %s", email, view.has_active_access)
    return view.as_dict()
