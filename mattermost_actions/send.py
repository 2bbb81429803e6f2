"""Send a post to a Mattermost channel or user.

Targets:
    channel:<id>      post into that channel
    <id>              same as channel:<id>
    user:<id>         open (or reuse) a direct channel with that user
    mattermost:<id>   same as user:<id>
    @<username>       look the user up by name, then as user:<id>

Media URLs are downloaded (up to the account's `mediaMaxMb`, 20 MB by default)
and uploaded to the server as file attachments.
"""

from __future__ import annotations

import logging
import posixpath
from typing import List, Literal, NamedTuple, Optional, Tuple
from urllib.parse import urlparse

import httpx

from mattermost_actions.client import (
    MattermostClient,
    create_direct_channel,
    create_post,
    fetch_me,
    fetch_user_by_username,
    resolve_client,
    upload_file,
)
from mattermost_actions.config import ConfigInput
from mattermost_actions.errors import RemoteApiError, ValidationError
from mattermost_actions.types import SendResult

logger = logging.getLogger(__name__)

TargetKind = Literal["channel", "user", "username"]


class SendTarget(NamedTuple):
    kind: TargetKind
    id: str


_PREFIXES = (
    ("channel:", "channel"),
    ("user:", "user"),
    ("mattermost:", "user"),
)


def parse_send_target(raw: Optional[str]) -> SendTarget:
    target = (raw or "").strip()
    if not target:
        raise ValidationError("Recipient is required for Mattermost sends")

    kind: TargetKind = "channel"
    value = target
    lowered = target.lower()
    for prefix, prefix_kind in _PREFIXES:
        if lowered.startswith(prefix):
            kind = prefix_kind  # type: ignore[assignment]
            value = target[len(prefix):].strip()
            break
    else:
        if target.startswith("@"):
            kind, value = "username", target[1:].strip()

    if not value:
        raise ValidationError(f"Invalid Mattermost target: {target}")
    return SendTarget(kind=kind, id=value)


async def resolve_target_channel_id(client: MattermostClient, target: SendTarget) -> str:
    if target.kind == "channel":
        return target.id
    bot = await fetch_me(client)
    if target.kind == "username":
        user_id = (await fetch_user_by_username(client, target.id)).id
    else:
        user_id = target.id
    channel = await create_direct_channel(client, [bot.id, user_id])
    return channel.id


def _filename_from_url(url: str) -> str:
    name = posixpath.basename(urlparse(url).path)
    return name or "attachment"


async def _download_media(media_url: str, *, timeout: float, max_bytes: int) -> Tuple[bytes, str]:
    """Stream `media_url` into memory, refusing bodies over `max_bytes`."""
    chunks: List[bytes] = []
    received = 0
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http:
            async with http.stream("GET", media_url) as response:
                response.raise_for_status()
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > max_bytes:
                    raise ValidationError(
                        f"Media at {media_url} is {declared} bytes, limit is {max_bytes}"
                    )
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > max_bytes:
                        raise ValidationError(
                            f"Media at {media_url} exceeds the {max_bytes} byte limit"
                        )
                    chunks.append(chunk)
                content_type = response.headers.get("content-type", "")
    except httpx.HTTPError as e:
        raise RemoteApiError(f"Failed to download media from {media_url}: {e}") from e

    return b"".join(chunks), content_type.split(";")[0].strip() or "application/octet-stream"


async def _upload_media(client: MattermostClient, channel_id: str, media_url: str) -> str:
    content, content_type = await _download_media(
        media_url, timeout=client.timeout, max_bytes=client.media_max_bytes
    )
    info = await upload_file(
        client,
        channel_id=channel_id,
        filename=_filename_from_url(media_url),
        content=content,
        content_type=content_type,
    )
    return info.id


async def send_message(
    to: str,
    text: str,
    *,
    cfg: ConfigInput = None,
    account_id: Optional[str] = None,
    media_url: Optional[str] = None,
    reply_to_id: Optional[str] = None,
) -> SendResult:
    """Post `text` (and optional media) to `to`.

    `reply_to_id` threads the post under an existing root post.
    """
    target = parse_send_target(to)
    media = (media_url or "").strip() or None
    if not (text or "").strip() and not media:
        raise ValidationError("Mattermost message is empty")

    client = resolve_client(cfg, account_id)
    channel_id = await resolve_target_channel_id(client, target)

    file_ids = [await _upload_media(client, channel_id, media)] if media else None
    post = await create_post(
        client,
        channel_id=channel_id,
        message=text or "",
        root_id=(reply_to_id or "").strip() or None,
        file_ids=file_ids,
    )
    logger.info("Sent Mattermost post %s to channel %s", post.id, channel_id)
    return SendResult(message_id=post.id, channel_id=post.channel_id or channel_id)
