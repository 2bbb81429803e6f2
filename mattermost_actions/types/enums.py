from __future__ import annotations

from enum import Enum


class ActionName(str, Enum):
    """Operations the adapter can advertise to the host framework.

    Values are the wire names the host uses when invoking an action.

    Example:
        >>> from mattermost_actions.types import ActionName
        >>> ActionName("list-pins") is ActionName.LIST_PINS
        True
    """

    SEND = "send"
    REACT = "react"
    REACTIONS = "reactions"
    READ = "read"
    EDIT = "edit"
    DELETE = "delete"
    PIN = "pin"
    UNPIN = "unpin"
    LIST_PINS = "list-pins"


class GateName(str, Enum):
    """Configuration switches that enable or disable groups of actions.

    - REACTIONS: react, reactions
    - MESSAGES: read, edit, delete
    - PINS: pin, unpin, list-pins

    `send` has no gate and is always advertised once an account is usable.
    """

    REACTIONS = "reactions"
    MESSAGES = "messages"
    PINS = "pins"
