from __future__ import annotations

from fastapi import APIRouter, Depends

from mattermost_actions.accounts import list_enabled_accounts
from server.config import Settings, get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> dict:
    """Return service health and whether a usable Mattermost account is configured."""
    return {
        "ok": True,
        "service": "mattermost-actions",
        "version": settings.app_version,
        "configured": bool(list_enabled_accounts(settings.host_config())),
    }


@router.get("/healthz")
async def healthz() -> dict:
    """Alternative health endpoint for load balancers."""
    return {"status": "ok"}
