import json
import logging

from fastapi import APIRouter, Depends, Request

from .config import get_settings
from .entitlements import EntitlementStore, get_store
from .errors import error_response
from .hooks import WebhookPayloadError, dispatch_event, parse_event
from .security.webhooks import WebhookConfigError, WebhookSignatureError, verify_webhook


logger = logging.getLogger("storefront.webhooks")

router = APIRouter(prefix="/api", tags=["webhooks"])


@router.post("/webhook")
async def receive_webhook(request: Request, store: EntitlementStore = Depends(get_store)):
    """Verify, parse and apply one provider delivery.

    401 means the signature did not verify; the store is never touched in
    that case. Unknown event kinds still answer 200 so the provider stops
    redelivering them.
    """
    body = await request.body()
    try:
        payload = verify_webhook(body, request.headers, get_settings().webhook_key)
    except WebhookConfigError as exc:
        logger.error("Webhook rejected, verification is not configured: %s", exc)
        return error_response(request, "webhook_misconfigured", status_code=500, detail=str(exc))
    except WebhookSignatureError:
        return error_response(request, "invalid_signature", status_code=401)
    except json.JSONDecodeError:
        return error_response(request, "invalid_payload", status_code=400, detail="body is not valid JSON")

    try:
        event = parse_event(payload)
    except WebhookPayloadError as exc:
        logger.warning("Webhook payload rejected: %s", exc)
        return error_response(request, "invalid_payload", status_code=400, detail=str(exc))

    result = dispatch_event(store, event)
    return {"received": True, "type": result.event_type, "handled": result.handled}
