"""Inbound payment webhooks: typed events and their dispatch to the store."""

from .dispatcher import DispatchResult, dispatch_event
from .events import WebhookPayloadError, parse_event

__all__ = ["DispatchResult", "WebhookPayloadError", "dispatch_event", "parse_event"]
