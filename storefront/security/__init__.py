"""Webhook signature verification."""

from .webhooks import WebhookConfigError, WebhookSignatureError, sign_webhook, verify_webhook

__all__ = ["WebhookConfigError", "WebhookSignatureError", "sign_webhook", "verify_webhook"]
