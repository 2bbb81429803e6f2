"""Router aggregation."""

from __future__ import annotations

from fastapi import APIRouter

from mattermost_actions.routers import actions as actions_router_module
from mattermost_actions.routers import health as health_router_module

# Create aggregated router
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router_module.router)
api_router.include_router(actions_router_module.router)

__all__ = ["api_router"]
