from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest
import respx

from mattermost_actions import actions as actions_module
from mattermost_actions.actions import (
    ACTION_HANDLERS,
    extract_tool_send,
    handle_action,
    list_actions,
    mattermost_message_actions,
)
from mattermost_actions.errors import (
    ConfigurationError,
    RemoteApiError,
    UnsupportedActionError,
    ValidationError,
)
from mattermost_actions.types import ActionName, SendResult
from tests.fixtures.mattermost_payloads import (
    API,
    BOT_USER_ID,
    bot_user,
    mm_cfg,
    post,
    post_list,
    reaction,
)

ALL_ACTIONS = {"send", "react", "reactions", "read", "edit", "delete", "pin", "unpin", "list-pins"}


# --- list_actions ---


def test_list_actions_empty_when_integration_disabled() -> None:
    assert list_actions({"channels": {"mattermost": {"enabled": False}}}) == []


def test_list_actions_empty_without_config() -> None:
    assert list_actions({}) == []
    assert list_actions(None) == []


def test_list_actions_empty_when_token_missing() -> None:
    assert list_actions(mm_cfg(botToken="")) == []


def test_list_actions_empty_when_base_url_normalizes_to_nothing() -> None:
    assert list_actions(mm_cfg(baseUrl="/")) == []


def test_list_actions_empty_when_only_account_is_disabled() -> None:
    cfg = {
        "channels": {
            "mattermost": {
                "accounts": {"ops": {"botToken": "t", "baseUrl": "https://h", "enabled": False}}
            }
        }
    }
    assert list_actions(cfg) == []


def test_list_actions_all_when_no_gates_disabled() -> None:
    actions = list_actions(mm_cfg())
    assert set(actions) == ALL_ACTIONS
    assert len(actions) == len(ALL_ACTIONS)


@pytest.mark.parametrize(
    "gate, removed",
    [
        ("reactions", {"react", "reactions"}),
        ("messages", {"read", "edit", "delete"}),
        ("pins", {"pin", "unpin", "list-pins"}),
    ],
)
def test_list_actions_gate_removes_exactly_its_group(gate: str, removed: set) -> None:
    actions = list_actions(mm_cfg(actions={gate: False}))
    assert set(actions) == ALL_ACTIONS - removed


def test_list_actions_explicit_true_gate_keeps_group() -> None:
    actions = list_actions(mm_cfg(actions={"reactions": True, "pins": None}))
    assert set(actions) == ALL_ACTIONS


def test_list_actions_send_survives_all_gates_off() -> None:
    cfg = mm_cfg(actions={"reactions": False, "messages": False, "pins": False})
    assert list_actions(cfg) == ["send"]


def test_every_action_has_a_handler() -> None:
    assert set(ACTION_HANDLERS) == set(ActionName)


# --- extract_tool_send ---


def test_extract_tool_send_reads_target() -> None:
    assert extract_tool_send({"action": "sendMessage", "to": "ch-123"}) == {"to": "ch-123"}
    assert extract_tool_send({"action": "  sendMessage ", "to": "ch-123"}) == {"to": "ch-123"}


def test_extract_tool_send_ignores_other_actions() -> None:
    assert extract_tool_send({"action": "react", "to": "ch-123"}) is None


def test_extract_tool_send_requires_string_target() -> None:
    assert extract_tool_send({"action": "sendMessage"}) is None
    assert extract_tool_send({"action": "sendMessage", "to": 42}) is None


# --- handle_action: dispatch ---


@pytest.mark.asyncio
async def test_unknown_action_is_not_supported() -> None:
    with pytest.raises(UnsupportedActionError, match="is not supported"):
        await handle_action("unknownAction", {}, mm_cfg())


@pytest.mark.asyncio
async def test_adapter_object_delegates() -> None:
    with pytest.raises(UnsupportedActionError, match="not supported"):
        await mattermost_message_actions.handle_action("poll", {}, mm_cfg())
    assert set(mattermost_message_actions.list_actions(mm_cfg())) == ALL_ACTIONS


# --- send ---


class _SendRecorder:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, to: str, text: str, **kwargs: Any) -> SendResult:
        self.calls.append({"to": to, "text": text, **kwargs})
        return SendResult(message_id="new-msg-1", channel_id="ch-1")


@pytest.fixture()
def send_recorder(monkeypatch: pytest.MonkeyPatch) -> _SendRecorder:
    recorder = _SendRecorder()
    monkeypatch.setattr(actions_module.send_module, "send_message", recorder)
    return recorder


@pytest.mark.asyncio
async def test_send_delegates_to_send_collaborator(send_recorder: _SendRecorder) -> None:
    result = await handle_action("send", {"to": "c1", "message": "hi"}, mm_cfg(botToken="t", baseUrl="https://h/"))

    assert len(send_recorder.calls) == 1
    call = send_recorder.calls[0]
    assert (call["to"], call["text"]) == ("c1", "hi")
    assert call["media_url"] is None
    assert call["reply_to_id"] is None
    assert result == {"ok": True, "messageId": "new-msg-1", "channelId": "ch-1"}


@pytest.mark.asyncio
async def test_send_passes_media_reply_and_account(send_recorder: _SendRecorder) -> None:
    await handle_action(
        "send",
        {
            "to": "ch-1",
            "message": "pic",
            "media": "https://img.test/a.png",
            "replyTo": "parent-1",
            "accountId": "ops",
        },
        mm_cfg(),
    )

    call = send_recorder.calls[0]
    assert call["media_url"] == "https://img.test/a.png"
    assert call["reply_to_id"] == "parent-1"
    assert call["account_id"] == "ops"


@pytest.mark.asyncio
async def test_send_explicit_account_wins_over_params(send_recorder: _SendRecorder) -> None:
    await handle_action("send", {"to": "ch-1", "message": "x", "accountId": "a"}, mm_cfg(), "b")
    assert send_recorder.calls[0]["account_id"] == "b"


@pytest.mark.asyncio
async def test_send_blank_explicit_account_is_not_replaced_by_params(
    send_recorder: _SendRecorder,
) -> None:
    await handle_action("send", {"to": "ch-1", "message": "x", "accountId": "a"}, mm_cfg(), "")
    assert send_recorder.calls[0]["account_id"] == ""


@pytest.mark.asyncio
async def test_send_allows_blank_message(send_recorder: _SendRecorder) -> None:
    await handle_action("send", {"to": "ch-1", "message": ""}, mm_cfg())
    assert send_recorder.calls[0]["text"] == ""


@pytest.mark.asyncio
async def test_send_requires_target_and_message(send_recorder: _SendRecorder) -> None:
    with pytest.raises(ValidationError, match="to required"):
        await handle_action("send", {"message": "hi"}, mm_cfg())
    with pytest.raises(ValidationError, match="message required"):
        await handle_action("send", {"to": "ch-1"}, mm_cfg())
    assert send_recorder.calls == []


# --- react ---


@pytest.mark.asyncio
@respx.mock
async def test_react_adds_reaction_as_bot() -> None:
    me = respx.get(f"{API}/users/me").mock(return_value=httpx.Response(200, json=bot_user()))
    add = respx.post(f"{API}/reactions").mock(
        return_value=httpx.Response(200, json=reaction(user_id=BOT_USER_ID))
    )

    result = await handle_action("react", {"messageId": "post-1", "emoji": "thumbsup"}, mm_cfg())

    assert me.called
    sent = json.loads(add.calls.last.request.content.decode())
    assert sent == {"user_id": BOT_USER_ID, "post_id": "post-1", "emoji_name": "thumbsup"}
    assert add.calls.last.request.headers["Authorization"] == "Bearer bot-tok"
    assert result == {"ok": True, "added": "thumbsup"}


@pytest.mark.asyncio
@respx.mock
async def test_react_removes_reaction_when_flag_set() -> None:
    respx.get(f"{API}/users/me").mock(return_value=httpx.Response(200, json=bot_user()))
    remove = respx.delete(
        f"{API}/users/{BOT_USER_ID}/posts/post-1/reactions/thumbsup"
    ).mock(return_value=httpx.Response(200, json={"status": "OK"}))

    result = await handle_action(
        "react", {"messageId": "post-1", "emoji": "thumbsup", "remove": True}, mm_cfg()
    )

    assert remove.called
    assert result == {"ok": True, "removed": True, "emoji": "thumbsup"}


@pytest.mark.asyncio
@respx.mock
async def test_react_validation_happens_before_any_request() -> None:
    me = respx.get(f"{API}/users/me").mock(return_value=httpx.Response(200, json=bot_user()))

    with pytest.raises(ValidationError, match="emoji"):
        await handle_action("react", {"messageId": "post-1"}, mm_cfg())
    with pytest.raises(ValidationError, match="messageId"):
        await handle_action("react", {"emoji": "thumbsup"}, mm_cfg())
    with pytest.raises(ValidationError, match="emoji name"):
        await handle_action("react", {"messageId": "post-1", "remove": True}, mm_cfg())

    assert not me.called


@pytest.mark.asyncio
@respx.mock
async def test_react_fails_whole_action_when_identity_fetch_fails() -> None:
    respx.get(f"{API}/users/me").mock(
        return_value=httpx.Response(401, json={"message": "Invalid or expired session"})
    )
    add = respx.post(f"{API}/reactions")

    with pytest.raises(RemoteApiError) as excinfo:
        await handle_action("react", {"messageId": "post-1", "emoji": "x"}, mm_cfg())

    assert excinfo.value.status_code == 401
    assert not add.called


# --- reactions ---


@pytest.mark.asyncio
@respx.mock
async def test_reactions_lists_normalized_reactions() -> None:
    route = respx.get(f"{API}/posts/post-1/reactions").mock(
        return_value=httpx.Response(200, json=[reaction()])
    )

    result = await handle_action("reactions", {"messageId": "post-1"}, mm_cfg())

    assert route.called
    assert result == {
        "ok": True,
        "messageId": "post-1",
        "reactions": [{"userId": "u1", "emoji": "thumbsup", "createdAt": 1000}],
    }


@pytest.mark.asyncio
@respx.mock
async def test_reactions_null_body_is_empty_list() -> None:
    respx.get(f"{API}/posts/post-1/reactions").mock(
        return_value=httpx.Response(200, content=b"null", headers={"content-type": "application/json"})
    )
    result = await handle_action("reactions", {"messageId": "post-1"}, mm_cfg())
    assert result["reactions"] == []


# --- read ---


@pytest.mark.asyncio
@respx.mock
async def test_read_returns_posts_in_server_order() -> None:
    respx.get(f"{API}/channels/ch-1/posts").mock(
        return_value=httpx.Response(
            200,
            json=post_list(
                post("p1", user_id="u1", message="first", create_at=1000),
                post("p2", user_id="u2", message="second", create_at=2000),
                order=["p2", "p1"],
            ),
        )
    )

    result = await handle_action("read", {"to": "ch-1"}, mm_cfg())

    assert result == {
        "ok": True,
        "channelId": "ch-1",
        "messages": [
            {"id": "p2", "userId": "u2", "message": "second", "createdAt": 2000},
            {"id": "p1", "userId": "u1", "message": "first", "createdAt": 1000},
        ],
    }


@pytest.mark.asyncio
@respx.mock
async def test_read_includes_thread_and_files_when_present() -> None:
    respx.get(f"{API}/channels/ch-1/posts").mock(
        return_value=httpx.Response(
            200,
            json=post_list(post("p1", root_id="root-1", file_ids=["f1", "f2"]), post("p2", file_ids=[])),
        )
    )

    result = await handle_action("read", {"channelId": "ch-1"}, mm_cfg())

    first, second = result["messages"]
    assert first["rootId"] == "root-1"
    assert first["fileIds"] == ["f1", "f2"]
    assert "rootId" not in second
    assert "fileIds" not in second


@pytest.mark.asyncio
@respx.mock
async def test_read_passes_pagination_params() -> None:
    route = respx.get(f"{API}/channels/ch-1/posts").mock(
        return_value=httpx.Response(200, json=post_list())
    )

    await handle_action(
        "read",
        {"channelId": "ch-1", "limit": 5, "before": "cursor-b", "after": "cursor-a"},
        mm_cfg(),
    )

    params = route.calls.last.request.url.params
    assert params["per_page"] == "5"
    assert params["before"] == "cursor-b"
    assert params["after"] == "cursor-a"


@pytest.mark.asyncio
@respx.mock
async def test_read_omits_unset_pagination_params() -> None:
    route = respx.get(f"{API}/channels/ch-1/posts").mock(
        return_value=httpx.Response(200, json=post_list())
    )
    await handle_action("read", {"channelId": "ch-1", "limit": "7.9"}, mm_cfg())

    params = route.calls.last.request.url.params
    assert params["per_page"] == "7"
    assert "before" not in params
    assert "after" not in params


@pytest.mark.asyncio
@respx.mock
async def test_read_prefers_channel_id_over_to() -> None:
    explicit = respx.get(f"{API}/channels/explicit/posts").mock(
        return_value=httpx.Response(200, json=post_list())
    )
    fallback = respx.get(f"{API}/channels/fallback/posts")

    result = await handle_action("read", {"channelId": "explicit", "to": "fallback"}, mm_cfg())

    assert explicit.called
    assert not fallback.called
    assert result["channelId"] == "explicit"


@pytest.mark.asyncio
async def test_read_requires_a_channel() -> None:
    with pytest.raises(ValidationError, match="to required"):
        await handle_action("read", {}, mm_cfg())


@pytest.mark.asyncio
async def test_read_rejects_non_numeric_limit() -> None:
    with pytest.raises(ValidationError, match="limit"):
        await handle_action("read", {"channelId": "ch-1", "limit": "lots"}, mm_cfg())


# --- edit / delete ---


@pytest.mark.asyncio
@respx.mock
async def test_edit_patches_post() -> None:
    route = respx.put(f"{API}/posts/post-1/patch").mock(
        return_value=httpx.Response(200, json=post("post-1", message="edited"))
    )

    result = await handle_action("edit", {"messageId": "post-1", "message": "updated text"}, mm_cfg())

    assert json.loads(route.calls.last.request.content.decode()) == {"message": "updated text"}
    assert result == {"ok": True, "messageId": "post-1", "message": "edited"}


@pytest.mark.asyncio
async def test_edit_requires_message_id_and_message() -> None:
    with pytest.raises(ValidationError, match="messageId"):
        await handle_action("edit", {"message": "updated"}, mm_cfg())
    with pytest.raises(ValidationError, match="message required"):
        await handle_action("edit", {"messageId": "post-1"}, mm_cfg())
    with pytest.raises(ValidationError, match="message required"):
        await handle_action("edit", {"messageId": "post-1", "message": "   "}, mm_cfg())


@pytest.mark.asyncio
@respx.mock
async def test_delete_removes_post() -> None:
    route = respx.delete(f"{API}/posts/post-1").mock(
        return_value=httpx.Response(200, json={"status": "OK"})
    )

    result = await handle_action("delete", {"messageId": "post-1"}, mm_cfg())

    assert route.called
    assert result == {"ok": True, "messageId": "post-1", "deleted": True}


@pytest.mark.asyncio
@respx.mock
async def test_delete_surfaces_not_found() -> None:
    respx.delete(f"{API}/posts/gone").mock(
        return_value=httpx.Response(404, json={"message": "Unable to find the existing post."})
    )
    with pytest.raises(RemoteApiError, match="404"):
        await handle_action("delete", {"messageId": "gone"}, mm_cfg())


# --- pins ---


@pytest.mark.asyncio
@respx.mock
async def test_pin_and_unpin() -> None:
    pin = respx.post(f"{API}/posts/post-1/pin").mock(
        return_value=httpx.Response(200, json={"status": "OK"})
    )
    unpin = respx.post(f"{API}/posts/post-1/unpin").mock(
        return_value=httpx.Response(200, json={"status": "OK"})
    )

    pinned = await handle_action("pin", {"messageId": "post-1"}, mm_cfg())
    unpinned = await handle_action("unpin", {"messageId": "post-1"}, mm_cfg())

    assert pin.called and unpin.called
    assert pinned == {"ok": True, "messageId": "post-1", "pinned": True}
    assert unpinned == {"ok": True, "messageId": "post-1", "unpinned": True}


@pytest.mark.asyncio
@respx.mock
async def test_list_pins_normalizes_pinned_posts() -> None:
    respx.get(f"{API}/channels/ch-1/pinned").mock(
        return_value=httpx.Response(
            200,
            json=post_list(post("pin-1", user_id="u1", message="pinned msg", create_at=2000, root_id="r")),
        )
    )

    result = await handle_action("list-pins", {"to": "ch-1"}, mm_cfg())

    assert result == {
        "ok": True,
        "channelId": "ch-1",
        "pins": [{"id": "pin-1", "userId": "u1", "message": "pinned msg", "createdAt": 2000}],
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["pin", "unpin", "delete", "reactions"])
async def test_post_scoped_actions_require_message_id(action: str) -> None:
    with pytest.raises(ValidationError, match="messageId"):
        await handle_action(action, {}, mm_cfg())


# --- account resolution ---


@pytest.mark.asyncio
async def test_missing_token_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="bot token missing"):
        await handle_action("pin", {"messageId": "post-1"}, mm_cfg(botToken=""))


@pytest.mark.asyncio
async def test_disabled_account_cannot_be_forced() -> None:
    cfg = {
        "channels": {
            "mattermost": {
                "accounts": {
                    "main": {"botToken": "t", "baseUrl": "https://h"},
                    "old": {"botToken": "t", "baseUrl": "https://h", "enabled": False},
                }
            }
        }
    }
    with pytest.raises(ConfigurationError, match="disabled"):
        await handle_action("pin", {"messageId": "post-1"}, cfg, "old")


@pytest.mark.asyncio
@respx.mock
async def test_named_account_uses_its_own_server() -> None:
    cfg = {
        "channels": {
            "mattermost": {
                "botToken": "shared-tok",
                "accounts": {
                    "main": {"baseUrl": "https://main.test"},
                    "ops": {"baseUrl": "https://ops.test/", "botToken": "ops-tok"},
                },
            }
        }
    }
    route = respx.post("https://ops.test/api/v4/posts/post-1/pin").mock(
        return_value=httpx.Response(200, json={"status": "OK"})
    )

    await handle_action("pin", {"messageId": "post-1", "accountId": "ops"}, cfg)

    assert route.calls.last.request.headers["Authorization"] == "Bearer ops-tok"
