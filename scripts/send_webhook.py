#!/usr/bin/env python3
"""Sign and post a sample provider event to a running storefront."""
import argparse
import json
import logging
import os
import sys
from datetime import datetime, timedelta, timezone

import httpx
from dotenv import load_dotenv

# Ensure repository root is on sys.path
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(CURRENT_DIR)
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("storefront.send_webhook")

EVENT_TYPES = (
    "payment.succeeded",
    "subscription.active",
    "subscription.renewed",
    "subscription.cancelled",
    "subscription.failed",
)


def build_event(kind: str, email: str, product_id: str, ref: str) -> dict:
    now = datetime.now(timezone.utc)
    customer = {"customer_id": "cus_demo", "email": email, "name": "Demo Customer"}
    if kind == "payment.succeeded":
        data = {
            "payment_id": ref or "pay_demo",
            "product_id": product_id,
            "total_amount": 1000,
            "currency": "USD",
            "customer": customer,
        }
    else:
        data = {
            "subscription_id": ref or "sub_demo",
            "product_id": product_id,
            "status": kind.split(".", 1)[1],
            "next_billing_date": (now + timedelta(days=30)).isoformat(),
            "recurring_pre_tax_amount": 500,
            "customer": customer,
        }
        if kind == "subscription.failed":
            data["failure_reason"] = "card_declined"
    return {"business_id": "bus_demo", "type": kind, "timestamp": now.isoformat(), "data": data}


def main():
    parser = argparse.ArgumentParser(description="Post a signed sample webhook to the storefront.")
    parser.add_argument("kind", help="Event type, e.g. payment.succeeded")
    parser.add_argument("--email", required=True, help="Customer email")
    parser.add_argument("--product", default=os.getenv("DEFAULT_PRODUCT_ID", "pdt_demo"), help="Product id")
    parser.add_argument("--ref", default="", help="payment_id or subscription_id to use")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{os.getenv('PORT', '3000')}/api/webhook",
        help="Webhook endpoint",
    )
    args = parser.parse_args()

    from storefront.security.webhooks import sign_webhook

    secret = os.getenv("DODO_PAYMENTS_WEBHOOK_KEY")
    if not secret:
        raise SystemExit("DODO_PAYMENTS_WEBHOOK_KEY not set.")
    if args.kind not in EVENT_TYPES:
        logger.warning("Sending unrecognized event type %s; the server will only log it", args.kind)

    body = json.dumps(build_event(args.kind, args.email, args.product, args.ref))
    headers = {"content-type": "application/json", **sign_webhook(body, secret)}
    with httpx.Client(timeout=5.0) as client:
        resp = client.post(args.url, content=body.encode("utf-8"), headers=headers)
    logger.info("Posted %s -> status=%s body=%s", args.kind, resp.status_code, resp.text)


if __name__ == "__main__":
    main()
