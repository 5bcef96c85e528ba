import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from standardwebhooks.webhooks import Webhook, WebhookVerificationError


logger = logging.getLogger("storefront.webhooks")

SIGNATURE_HEADERS = ("webhook-id", "webhook-timestamp", "webhook-signature")


class WebhookSignatureError(Exception):
    """Raised when a delivery fails Standard Webhooks verification."""


class WebhookConfigError(Exception):
    """Raised when no webhook key is configured."""


def _signature_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    lowered = {k.lower(): v for k, v in headers.items()}
    return {name: lowered[name] for name in SIGNATURE_HEADERS if name in lowered}


def verify_webhook(body: bytes, headers: Mapping[str, str], secret: Optional[str]) -> Any:
    """Verify a provider delivery and return its decoded JSON payload.

    Headers:
    - webhook-id: unique message id
    - webhook-timestamp: unix seconds, rejected outside the library's tolerance
    - webhook-signature: space-separated ``v1,<base64 hmac>`` entries

    Only a body that verified but is not JSON escapes as ``json.JSONDecodeError``.
    """
    if not secret:
        raise WebhookConfigError("DODO_PAYMENTS_WEBHOOK_KEY is not set")
    try:
        verifier = Webhook(secret)
    except Exception as exc:
        raise WebhookConfigError("DODO_PAYMENTS_WEBHOOK_KEY is not a valid signing key") from exc

    try:
        return verifier.verify(body, _signature_headers(headers))
    except WebhookVerificationError as exc:
        logger.warning("Webhook signature rejected: %s", exc)
        raise WebhookSignatureError(str(exc)) from exc
    except json.JSONDecodeError:
        raise
    except ValueError as exc:
        # malformed signature entries or a non-UTF-8 body, raised before any match
        logger.warning("Webhook signature rejected: %s", exc)
        raise WebhookSignatureError("malformed signature or body") from exc


def sign_webhook(
    body: str,
    secret: str,
    *,
    msg_id: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> Dict[str, str]:
    """Return the signature headers a provider would send with ``body``."""
    msg_id = msg_id or f"msg_{uuid.uuid4().hex}"
    timestamp = timestamp or datetime.now(timezone.utc)
    signature = Webhook(secret).sign(msg_id, timestamp, body)
    return {
        "webhook-id": msg_id,
        "webhook-timestamp": str(int(timestamp.timestamp())),
        "webhook-signature": signature,
    }


__all__ = ["WebhookConfigError", "WebhookSignatureError", "sign_webhook", "verify_webhook"]
