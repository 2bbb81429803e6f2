from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# JSON payload returned to the host: {"ok": bool, ...action fields}
ActionResult = Dict[str, Any]


class _HostModel(BaseModel):
    """Base for host-facing shapes; serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_host(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SendResult(_HostModel):
    """Outcome of the send collaborator.

    Example:
        >>> SendResult(message_id="p1", channel_id="c1").to_host()
        {'messageId': 'p1', 'channelId': 'c1'}
    """

    message_id: str
    channel_id: str


class NormalizedReaction(_HostModel):
    user_id: Optional[str] = None
    emoji: Optional[str] = None
    created_at: Optional[int] = None


class NormalizedMessage(_HostModel):
    """A channel post in host field names.

    `root_id` and `file_ids` are None (and therefore omitted from
    `to_host()`) when the post is not a reply or has no attachments.
    """

    id: Optional[str] = None
    user_id: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[int] = None
    root_id: Optional[str] = None
    file_ids: Optional[List[str]] = None


class NormalizedPin(_HostModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[int] = None
