"""Async Mattermost REST API v4 client.

`MattermostClient` is a lightweight handle: base URL, API base URL, token and
an authenticated `request` coroutine. It opens a short-lived
`httpx.AsyncClient` per request, so a handle can be created per action and
thrown away. The typed operations below wrap single endpoints and parse the
server's native JSON into the models from `mattermost_actions.types`.

See: https://api.mattermost.com/
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from mattermost_actions.accounts import API_PATH, normalize_base_url, resolve_account
from mattermost_actions.config import ConfigInput
from mattermost_actions.errors import ConfigurationError, RemoteApiError
from mattermost_actions.types import (
    RemoteChannel,
    RemoteFileInfo,
    RemotePost,
    RemotePostList,
    RemoteReaction,
    RemoteUser,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_MEDIA_MAX_BYTES = 20 * 1024 * 1024


def _segment(value: str) -> str:
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        detail: Any = response.json()
    except ValueError:
        detail = response.text
    reason = response.reason_phrase or ""
    summary = f"Mattermost API {response.status_code} {reason}".rstrip()
    if isinstance(detail, dict) and detail.get("message"):
        return f"{summary}: {detail['message']}", detail
    if isinstance(detail, str) and detail.strip():
        return f"{summary}: {detail.strip()}", detail
    return summary, detail


class MattermostClient:
    """Authenticated handle for one Mattermost server and bot token."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        media_max_bytes: int = DEFAULT_MEDIA_MAX_BYTES,
    ) -> None:
        self.base_url = base_url
        self.api_base_url = f"{base_url}{API_PATH}"
        self.token = token
        self.timeout = timeout
        self.media_max_bytes = media_max_bytes

    def __repr__(self) -> str:
        return f"MattermostClient(base_url={self.base_url!r})"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def url(self, path: str) -> str:
        return f"{self.api_base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Issue one API call and return the decoded body.

        Returns None for empty bodies (e.g. 204). Raises `RemoteApiError` for
        non-2xx responses and transport failures; nothing is retried.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.debug("Mattermost %s %s", method, path)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    self.url(path),
                    headers=self._headers(),
                    json=json,
                    params=query or None,
                    data=data,
                    files=files,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message, detail = _error_message(e.response)
            logger.warning("%s (%s %s)", message, method, path)
            raise RemoteApiError(
                message, status_code=e.response.status_code, detail=detail
            ) from e
        except httpx.RequestError as e:
            logger.warning("Mattermost request failed: %s %s: %s", method, path, e)
            raise RemoteApiError(f"Mattermost request failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


def create_client(
    base_url: Optional[str],
    bot_token: Optional[str],
    *,
    timeout: float = DEFAULT_TIMEOUT,
    media_max_bytes: int = DEFAULT_MEDIA_MAX_BYTES,
) -> MattermostClient:
    normalized = normalize_base_url(base_url)
    if not normalized:
        raise ConfigurationError("Mattermost baseUrl is required")
    token = (bot_token or "").strip()
    if not token:
        raise ConfigurationError("Mattermost bot token is required")
    return MattermostClient(normalized, token, timeout=timeout, media_max_bytes=media_max_bytes)


def resolve_client(cfg: ConfigInput, account_id: Optional[str] = None) -> MattermostClient:
    """Build a fresh client for the selected account.

    The account must be enabled and carry both a token and a base URL.
    """
    account = resolve_account(cfg, account_id)
    if not account.enabled:
        raise ConfigurationError(f'Mattermost account "{account.account_id}" is disabled')
    token = account.bot_token.strip()
    if not token:
        raise ConfigurationError(
            f'Mattermost bot token missing for account "{account.account_id}"'
        )
    base_url = account.base_url
    if not base_url:
        raise ConfigurationError(
            f'Mattermost baseUrl missing for account "{account.account_id}"'
        )
    timeout = account.config.get("timeout_seconds") or DEFAULT_TIMEOUT
    media_max_mb = account.config.get("media_max_mb")
    media_max_bytes = (
        int(media_max_mb * 1024 * 1024) if media_max_mb else DEFAULT_MEDIA_MAX_BYTES
    )
    return create_client(
        base_url, token, timeout=float(timeout), media_max_bytes=media_max_bytes
    )


# --- Users and channels ---


async def fetch_me(client: MattermostClient) -> RemoteUser:
    return RemoteUser.model_validate(await client.request("GET", "/users/me"))


async def fetch_user_by_username(client: MattermostClient, username: str) -> RemoteUser:
    return RemoteUser.model_validate(
        await client.request("GET", f"/users/username/{_segment(username)}")
    )


async def create_direct_channel(client: MattermostClient, user_ids: List[str]) -> RemoteChannel:
    return RemoteChannel.model_validate(
        await client.request("POST", "/channels/direct", json=list(user_ids))
    )


# --- Posts ---


async def create_post(
    client: MattermostClient,
    *,
    channel_id: str,
    message: str,
    root_id: Optional[str] = None,
    file_ids: Optional[List[str]] = None,
) -> RemotePost:
    payload: Dict[str, Any] = {"channel_id": channel_id, "message": message}
    if root_id:
        payload["root_id"] = root_id
    if file_ids:
        payload["file_ids"] = list(file_ids)
    return RemotePost.model_validate(await client.request("POST", "/posts", json=payload))


async def get_post(client: MattermostClient, post_id: str) -> RemotePost:
    return RemotePost.model_validate(
        await client.request("GET", f"/posts/{_segment(post_id)}")
    )


async def update_post(client: MattermostClient, post_id: str, message: str) -> RemotePost:
    return RemotePost.model_validate(
        await client.request(
            "PUT", f"/posts/{_segment(post_id)}/patch", json={"message": message}
        )
    )


async def delete_post(client: MattermostClient, post_id: str) -> None:
    await client.request("DELETE", f"/posts/{_segment(post_id)}")


async def get_channel_posts(
    client: MattermostClient,
    *,
    channel_id: str,
    per_page: Optional[int] = None,
    before: Optional[str] = None,
    after: Optional[str] = None,
) -> RemotePostList:
    data = await client.request(
        "GET",
        f"/channels/{_segment(channel_id)}/posts",
        params={"per_page": per_page, "before": before, "after": after},
    )
    return RemotePostList.model_validate(data or {})


# --- Reactions ---


async def add_reaction(
    client: MattermostClient, *, user_id: str, post_id: str, emoji_name: str
) -> RemoteReaction:
    payload = {"user_id": user_id, "post_id": post_id, "emoji_name": emoji_name}
    return RemoteReaction.model_validate(
        await client.request("POST", "/reactions", json=payload)
    )


async def remove_reaction(
    client: MattermostClient, *, user_id: str, post_id: str, emoji_name: str
) -> None:
    await client.request(
        "DELETE",
        f"/users/{_segment(user_id)}/posts/{_segment(post_id)}/reactions/{_segment(emoji_name)}",
    )


async def get_reactions(client: MattermostClient, post_id: str) -> List[RemoteReaction]:
    # Mattermost answers `null` rather than `[]` once the last reaction is gone
    data = await client.request("GET", f"/posts/{_segment(post_id)}/reactions")
    return [RemoteReaction.model_validate(item) for item in data or []]


# --- Pins ---


async def pin_post(client: MattermostClient, post_id: str) -> None:
    await client.request("POST", f"/posts/{_segment(post_id)}/pin")


async def unpin_post(client: MattermostClient, post_id: str) -> None:
    await client.request("POST", f"/posts/{_segment(post_id)}/unpin")


async def get_pinned_posts(client: MattermostClient, channel_id: str) -> RemotePostList:
    data = await client.request("GET", f"/channels/{_segment(channel_id)}/pinned")
    return RemotePostList.model_validate(data or {})


# --- Files ---


async def upload_file(
    client: MattermostClient,
    *,
    channel_id: str,
    filename: str,
    content: bytes,
    content_type: str = "application/octet-stream",
) -> RemoteFileInfo:
    data = await client.request(
        "POST",
        "/files",
        data={"channel_id": channel_id},
        files={"files": (filename, content, content_type)},
    )
    infos = (data or {}).get("file_infos") if isinstance(data, dict) else None
    if not infos:
        raise RemoteApiError("Mattermost file upload returned no file info", detail=data)
    return RemoteFileInfo.model_validate(infos[0])
