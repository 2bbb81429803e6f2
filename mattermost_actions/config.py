"""Typed host configuration for the Mattermost integration.

Hosts hand the adapter a free-form mapping; these models give that mapping a
stable shape. Keys are accepted in camelCase (the host's convention) or
snake_case, and unknown keys are preserved as opaque per-account settings.

Example:
    >>> from mattermost_actions.config import load_host_config
    >>> cfg = load_host_config(
    ...     {"channels": {"mattermost": {"botToken": "t", "baseUrl": "https://chat.example.com"}}}
    ... )
    >>> cfg.channels.mattermost.bot_token
    't'
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from mattermost_actions.errors import ConfigurationError


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class ActionGateConfig(_ConfigModel):
    """On/off switches for groups of actions.

    `None` (absent) and `True` both mean enabled; only an explicit `False`
    disables the group.
    """

    reactions: Optional[bool] = None
    messages: Optional[bool] = None
    pins: Optional[bool] = None


class MattermostAccountConfig(_ConfigModel):
    """Settings for one bot identity. Every field is optional so that named
    accounts can inherit from the integration-level defaults."""

    enabled: Optional[bool] = None
    name: Optional[str] = None
    bot_token: Optional[str] = None
    base_url: Optional[str] = None
    timeout_seconds: Optional[float] = None
    media_max_mb: Optional[float] = None


class MattermostConfig(MattermostAccountConfig):
    """Integration-level settings (`channels.mattermost`)."""

    default_account: Optional[str] = None
    actions: Optional[ActionGateConfig] = None
    accounts: Optional[Dict[str, MattermostAccountConfig]] = None


class ChannelsConfig(_ConfigModel):
    mattermost: Optional[MattermostConfig] = None


class HostConfig(_ConfigModel):
    """Root of the host configuration the adapter reads from."""

    channels: Optional[ChannelsConfig] = None

    @property
    def mattermost(self) -> Optional[MattermostConfig]:
        return self.channels.mattermost if self.channels else None


ConfigInput = Union[HostConfig, Mapping[str, Any], None]


def load_host_config(cfg: ConfigInput) -> HostConfig:
    """Coerce a mapping (or None) into a `HostConfig`; models pass through."""
    if cfg is None:
        return HostConfig()
    if isinstance(cfg, HostConfig):
        return cfg
    try:
        return HostConfig.model_validate(dict(cfg))
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid Mattermost configuration: {e}") from e
