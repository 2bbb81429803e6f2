from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

from mattermost_actions.config import ConfigInput

from .results import ActionResult


class ChannelMessageActions(Protocol):
    """Contract a host agent framework uses to drive a chat integration.

    Responsibilities:
        - Advertise which actions are currently usable (`list_actions`)
        - Recognize the host's generic send tool and extract its target
        - Validate and execute one named action, returning a JSON result

    Implementations raise on failure; hosts surface the error to the agent.
    """

    def list_actions(self, cfg: ConfigInput) -> List[str]:
        """Return the action names usable with the given configuration."""
        ...

    def extract_tool_send(self, args: Mapping[str, Any]) -> Optional[Dict[str, str]]:
        """Return `{"to": target}` for a generic sendMessage tool call, else None."""
        ...

    async def handle_action(
        self,
        action: str,
        params: Mapping[str, Any],
        cfg: ConfigInput,
        account_id: Optional[str] = None,
    ) -> ActionResult:
        """Execute exactly one action."""
        ...
