from fastapi import APIRouter

from .config import get_settings


router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    settings = get_settings()
    return {
        "ok": True,
        "environment": settings.environment,
        "webhooks_configured": bool(settings.webhook_key),
        "provider_configured": bool(settings.api_key),
    }
