"""Typed reads from the host's free-form action parameters.

Hosts pass whatever the agent produced, so every reader checks the runtime
type and raises `ValidationError` naming the field when a required value is
missing or malformed.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, NamedTuple, Optional, Union

from mattermost_actions.errors import ValidationError


def read_string_param(
    params: Mapping[str, Any],
    key: str,
    *,
    required: bool = False,
    trim: bool = True,
    allow_empty: bool = False,
    label: Optional[str] = None,
) -> Optional[str]:
    """Read a string parameter.

    Non-string values count as missing. Blank strings count as missing unless
    `allow_empty` is set.
    """
    label = label or key
    raw = params.get(key)
    if not isinstance(raw, str):
        if required:
            raise ValidationError(f"{label} required")
        return None
    value = raw.strip() if trim else raw
    if not value.strip() and not allow_empty:
        if required:
            raise ValidationError(f"{label} required")
        return None
    return value


def read_number_param(
    params: Mapping[str, Any],
    key: str,
    *,
    required: bool = False,
    integer: bool = False,
    label: Optional[str] = None,
) -> Optional[Union[int, float]]:
    """Read a numeric parameter from a number or a numeric string.

    With `integer=True` the value is truncated toward zero.
    """
    label = label or key
    raw = params.get(key)
    value: Optional[float] = None
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a number")
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            value = float(raw.strip())
        except ValueError as e:
            raise ValidationError(f"{label} must be a number") from e
    elif raw is not None and not isinstance(raw, str):
        raise ValidationError(f"{label} must be a number")

    if value is None:
        if required:
            raise ValidationError(f"{label} required")
        return None
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number")
    if integer:
        return math.trunc(value)
    return value


class ReactionParams(NamedTuple):
    emoji: str
    remove: bool


def read_reaction_params(
    params: Mapping[str, Any],
    *,
    emoji_key: str = "emoji",
    remove_key: str = "remove",
    remove_error_message: Optional[str] = None,
) -> ReactionParams:
    """Read the emoji name and the optional boolean remove flag."""
    remove = params.get(remove_key) is True
    emoji = read_string_param(params, emoji_key)
    if not emoji:
        if remove and remove_error_message:
            raise ValidationError(remove_error_message)
        raise ValidationError(f"{emoji_key} required")
    return ReactionParams(emoji=emoji, remove=remove)
