"""Mattermost message actions for agent host frameworks.

Usage:
    from mattermost_actions import mattermost_message_actions

    names = mattermost_message_actions.list_actions(cfg)
    result = await mattermost_message_actions.handle_action("read", {"to": "ch-1"}, cfg)
"""

from .actions import (
    MattermostMessageActions,
    extract_tool_send,
    handle_action,
    list_actions,
    mattermost_message_actions,
)
from .errors import (
    ConfigurationError,
    MattermostActionError,
    RemoteApiError,
    UnsupportedActionError,
    ValidationError,
)

__all__ = [
    "MattermostMessageActions",
    "mattermost_message_actions",
    "list_actions",
    "extract_tool_send",
    "handle_action",
    "MattermostActionError",
    "ConfigurationError",
    "ValidationError",
    "UnsupportedActionError",
    "RemoteApiError",
]
