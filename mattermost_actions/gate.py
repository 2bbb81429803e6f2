from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Tuple, Union

from mattermost_actions.config import ActionGateConfig
from mattermost_actions.types import ActionName, GateName

GateInput = Union[ActionGateConfig, Mapping[str, Any], None]
ActionGate = Callable[[Union[GateName, str]], bool]

# Actions each gate switches on or off; `send` is never gated
GATED_ACTIONS: Dict[GateName, Tuple[ActionName, ...]] = {
    GateName.REACTIONS: (ActionName.REACT, ActionName.REACTIONS),
    GateName.MESSAGES: (ActionName.READ, ActionName.EDIT, ActionName.DELETE),
    GateName.PINS: (ActionName.PIN, ActionName.UNPIN, ActionName.LIST_PINS),
}


def create_action_gate(actions: GateInput) -> ActionGate:
    """Return a predicate telling whether a gate is open.

    A gate is open unless the config sets it to exactly `False`.

    Example:
        >>> gate = create_action_gate({"pins": False})
        >>> gate("pins"), gate(GateName.REACTIONS)
        (False, True)
    """
    if isinstance(actions, ActionGateConfig):
        values = actions.model_dump()
    else:
        values = dict(actions or {})

    def gate(name: Union[GateName, str]) -> bool:
        key = name.value if isinstance(name, GateName) else name
        return values.get(key) is not False

    return gate
