"""Dispatch host actions to the Mattermost API.

The host framework calls three entry points:

- `list_actions(cfg)`: which actions to advertise right now
- `extract_tool_send(args)`: recognize the generic sendMessage tool
- `handle_action(action, params, cfg, account_id)`: run one action

Each action is a handler coroutine registered in `ACTION_HANDLERS`. Handlers
validate their parameters before resolving an account, build a fresh client
per call, and return a JSON-serializable `{"ok": True, ...}` payload. Errors
propagate to the host unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from mattermost_actions import send as send_module
from mattermost_actions.accounts import list_enabled_accounts
from mattermost_actions.client import (
    add_reaction,
    delete_post,
    fetch_me,
    get_channel_posts,
    get_pinned_posts,
    get_reactions,
    pin_post,
    remove_reaction,
    resolve_client,
    unpin_post,
    update_post,
)
from mattermost_actions.config import ConfigInput, HostConfig, load_host_config
from mattermost_actions.errors import UnsupportedActionError
from mattermost_actions.gate import GATED_ACTIONS, create_action_gate
from mattermost_actions.normalize import (
    normalize_message,
    normalize_pin,
    normalize_post_list,
    normalize_reactions,
)
from mattermost_actions.params import (
    read_number_param,
    read_reaction_params,
    read_string_param,
)
from mattermost_actions.types import ActionName, ActionResult

logger = logging.getLogger(__name__)

REMOVE_REACTION_ERROR = "Removing a Mattermost reaction requires an emoji name."


@dataclass(frozen=True)
class ActionContext:
    params: Mapping[str, Any]
    cfg: HostConfig
    account_id: Optional[str] = None


Handler = Callable[[ActionContext], Awaitable[ActionResult]]


def _ok(**fields: Any) -> ActionResult:
    return {"ok": True, **fields}


def resolve_channel_id(params: Mapping[str, Any]) -> str:
    """An explicit `channelId` wins over the generic `to` target."""
    channel_id = read_string_param(params, "channelId")
    if channel_id:
        return channel_id
    return read_string_param(params, "to", required=True)  # type: ignore[return-value]


async def _handle_send(ctx: ActionContext) -> ActionResult:
    to = read_string_param(ctx.params, "to", required=True)
    message = read_string_param(ctx.params, "message", required=True, allow_empty=True)
    media_url = read_string_param(ctx.params, "media", trim=False)
    reply_to = read_string_param(ctx.params, "replyTo")
    result = await send_module.send_message(
        to,
        message,
        cfg=ctx.cfg,
        account_id=ctx.account_id,
        media_url=media_url,
        reply_to_id=reply_to,
    )
    return _ok(**result.to_host())


async def _handle_react(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    reaction = read_reaction_params(ctx.params, remove_error_message=REMOVE_REACTION_ERROR)
    client = resolve_client(ctx.cfg, ctx.account_id)
    bot = await fetch_me(client)
    if reaction.remove:
        await remove_reaction(
            client, user_id=bot.id, post_id=message_id, emoji_name=reaction.emoji
        )
        return _ok(removed=True, emoji=reaction.emoji)
    await add_reaction(client, user_id=bot.id, post_id=message_id, emoji_name=reaction.emoji)
    return _ok(added=reaction.emoji)


async def _handle_reactions(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    client = resolve_client(ctx.cfg, ctx.account_id)
    reactions = await get_reactions(client, message_id)
    return _ok(
        messageId=message_id,
        reactions=[r.to_host() for r in normalize_reactions(reactions)],
    )


async def _handle_read(ctx: ActionContext) -> ActionResult:
    channel_id = resolve_channel_id(ctx.params)
    limit = read_number_param(ctx.params, "limit", integer=True)
    before = read_string_param(ctx.params, "before")
    after = read_string_param(ctx.params, "after")
    client = resolve_client(ctx.cfg, ctx.account_id)
    posts = await get_channel_posts(
        client,
        channel_id=channel_id,
        per_page=int(limit) if limit is not None else None,
        before=before,
        after=after,
    )
    messages = normalize_post_list(posts, normalize_message)
    return _ok(channelId=channel_id, messages=[m.to_host() for m in messages])


async def _handle_edit(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    message = read_string_param(ctx.params, "message", required=True)
    client = resolve_client(ctx.cfg, ctx.account_id)
    updated = await update_post(client, message_id, message)  # type: ignore[arg-type]
    return _ok(messageId=updated.id, message=updated.message)


async def _handle_delete(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    client = resolve_client(ctx.cfg, ctx.account_id)
    await delete_post(client, message_id)
    return _ok(messageId=message_id, deleted=True)


async def _handle_pin(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    client = resolve_client(ctx.cfg, ctx.account_id)
    await pin_post(client, message_id)
    return _ok(messageId=message_id, pinned=True)


async def _handle_unpin(ctx: ActionContext) -> ActionResult:
    message_id = read_string_param(ctx.params, "messageId", required=True)
    client = resolve_client(ctx.cfg, ctx.account_id)
    await unpin_post(client, message_id)
    return _ok(messageId=message_id, unpinned=True)


async def _handle_list_pins(ctx: ActionContext) -> ActionResult:
    channel_id = resolve_channel_id(ctx.params)
    client = resolve_client(ctx.cfg, ctx.account_id)
    pinned = await get_pinned_posts(client, channel_id)
    pins = normalize_post_list(pinned, normalize_pin)
    return _ok(channelId=channel_id, pins=[p.to_host() for p in pins])


ACTION_HANDLERS: Dict[ActionName, Handler] = {
    ActionName.SEND: _handle_send,
    ActionName.REACT: _handle_react,
    ActionName.REACTIONS: _handle_reactions,
    ActionName.READ: _handle_read,
    ActionName.EDIT: _handle_edit,
    ActionName.DELETE: _handle_delete,
    ActionName.PIN: _handle_pin,
    ActionName.UNPIN: _handle_unpin,
    ActionName.LIST_PINS: _handle_list_pins,
}


def list_actions(cfg: ConfigInput) -> List[str]:
    """Return the actions to advertise; empty when no account is usable."""
    host = load_host_config(cfg)
    if not list_enabled_accounts(host):
        return []
    section = host.mattermost
    gate = create_action_gate(section.actions if section else None)
    actions: List[ActionName] = [ActionName.SEND]
    for gate_name, gated in GATED_ACTIONS.items():
        if gate(gate_name):
            actions.extend(gated)
    return [a.value for a in actions]


def extract_tool_send(args: Mapping[str, Any]) -> Optional[Dict[str, str]]:
    action = args.get("action")
    if not isinstance(action, str) or action.strip() != "sendMessage":
        return None
    to = args.get("to")
    if isinstance(to, str) and to:
        return {"to": to}
    return None


async def handle_action(
    action: str,
    params: Optional[Mapping[str, Any]],
    cfg: ConfigInput,
    account_id: Optional[str] = None,
) -> ActionResult:
    """Validate and run one action.

    `account_id` falls back to `params["accountId"]` only when it is None.

    Raises:
        UnsupportedActionError: unknown action name.
        ValidationError: a required parameter is missing or malformed.
        ConfigurationError: the account cannot be used.
        RemoteApiError: the Mattermost API rejected a call.
    """
    try:
        name = ActionName(action)
    except ValueError:
        raise UnsupportedActionError(str(action)) from None
    handler = ACTION_HANDLERS.get(name)
    if handler is None:
        raise UnsupportedActionError(name.value)

    params = params or {}
    host = load_host_config(cfg)
    resolved_account_id = (
        account_id if account_id is not None else read_string_param(params, "accountId")
    )
    logger.info(
        "Handling Mattermost action %s (account=%s)",
        name.value,
        resolved_account_id or "default",
    )
    return await handler(ActionContext(params=params, cfg=host, account_id=resolved_account_id))


class MattermostMessageActions:
    """`ChannelMessageActions` implementation backed by this module."""

    def list_actions(self, cfg: ConfigInput) -> List[str]:
        return list_actions(cfg)

    def extract_tool_send(self, args: Mapping[str, Any]) -> Optional[Dict[str, str]]:
        return extract_tool_send(args)

    async def handle_action(
        self,
        action: str,
        params: Mapping[str, Any],
        cfg: ConfigInput,
        account_id: Optional[str] = None,
    ) -> ActionResult:
        return await handle_action(action, params, cfg, account_id)


mattermost_message_actions = MattermostMessageActions()
