"""Core types for the Mattermost action adapter.

Enums, resolved accounts, remote payload projections, host-facing result
shapes and the adapter protocol live here. Most modules should import types
from this package rather than from submodules.

Usage:
    from mattermost_actions.types import ActionName, RemotePost, SendResult
"""

from .accounts import CredentialSource, ResolvedAccount
from .enums import ActionName, GateName
from .protocols import ChannelMessageActions
from .remote import (
    RemoteChannel,
    RemoteFileInfo,
    RemotePost,
    RemotePostList,
    RemoteReaction,
    RemoteUser,
)
from .results import (
    ActionResult,
    NormalizedMessage,
    NormalizedPin,
    NormalizedReaction,
    SendResult,
)

__all__ = [
    "ActionName",
    "GateName",
    "CredentialSource",
    "ResolvedAccount",
    "RemoteUser",
    "RemoteChannel",
    "RemotePost",
    "RemotePostList",
    "RemoteReaction",
    "RemoteFileInfo",
    "ActionResult",
    "SendResult",
    "NormalizedReaction",
    "NormalizedMessage",
    "NormalizedPin",
    "ChannelMessageActions",
]
