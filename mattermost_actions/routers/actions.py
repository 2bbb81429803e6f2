from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from mattermost_actions.actions import handle_action, list_actions
from mattermost_actions.types import ActionResult
from server.config import Settings, get_settings


router = APIRouter(prefix="/actions", tags=["actions"])


class ActionRequest(BaseModel):
    """Body of `POST /actions/{action}`.

    Example:
        {"params": {"messageId": "p1", "emoji": "thumbsup"}, "accountId": "ops"}
    """

    model_config = ConfigDict(populate_by_name=True)

    params: Dict[str, Any] = Field(default_factory=dict)
    account_id: Optional[str] = Field(default=None, alias="accountId")


@router.get("")
async def get_actions(settings: Settings = Depends(get_settings)) -> dict:
    """List the actions currently advertised for the configured account."""
    return {"ok": True, "actions": list_actions(settings.host_config())}


@router.post("/{action}")
async def run_action(
    action: str,
    payload: Optional[ActionRequest] = None,
    settings: Settings = Depends(get_settings),
) -> ActionResult:
    """Run one action. Adapter errors are mapped to HTTP codes by the app."""
    request = payload or ActionRequest()
    return await handle_action(
        action, request.params, settings.host_config(), request.account_id
    )
