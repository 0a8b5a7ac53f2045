from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from site_builder import __version__
from site_builder.core.config import get_settings


router = APIRouter()


@router.get("/health", summary="Gateway health check", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """
    Readiness probe. Reports which providers can be routed to; it never
    contacts an upstream provider and never sees a credential.
    """
    settings = get_settings()
    disabled = {name.strip().lower() for name in settings.disabled_providers}

    return {
        "status": "ok",
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "providers": [name for name in settings.provider_order if name not in disabled],
        "time": datetime.now(timezone.utc).isoformat(),
    }
