"""Projections of Mattermost API v4 payloads.

Only the fields the adapter reads are declared; everything else the server
sends is kept as extra data so nothing is lost when debugging. These models
stay inside the adapter and are normalized before reaching the host.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class _RemoteModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class RemoteUser(_RemoteModel):
    id: str
    username: Optional[str] = None


class RemoteChannel(_RemoteModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    team_id: Optional[str] = None


class RemotePost(_RemoteModel):
    id: str
    user_id: Optional[str] = None
    channel_id: Optional[str] = None
    message: Optional[str] = None
    create_at: Optional[int] = None
    update_at: Optional[int] = None
    root_id: Optional[str] = None
    file_ids: Optional[List[str]] = None


class RemoteReaction(_RemoteModel):
    user_id: Optional[str] = None
    post_id: Optional[str] = None
    emoji_name: Optional[str] = None
    create_at: Optional[int] = None


class RemotePostList(_RemoteModel):
    """`{order, posts}` envelope used by channel and pinned-post listings.

    `order` is authoritative for ordering; `posts` is a lookup table.
    """

    order: List[str] = []
    posts: Dict[str, RemotePost] = {}

    @field_validator("order", "posts", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return [] if info.field_name == "order" else {}
        return v


class RemoteFileInfo(_RemoteModel):
    id: str
    name: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
