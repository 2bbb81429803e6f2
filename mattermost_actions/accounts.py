"""Resolve Mattermost bot accounts from host configuration.

An integration can declare a single account inline (`botToken`/`baseUrl` on
`channels.mattermost`) or several named accounts under `accounts`. Named
accounts inherit every integration-level setting they do not override.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from mattermost_actions.config import (
    ConfigInput,
    HostConfig,
    MattermostAccountConfig,
    MattermostConfig,
    load_host_config,
)
from mattermost_actions.errors import ConfigurationError
from mattermost_actions.types import CredentialSource, ResolvedAccount

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_ID = "default"
API_PATH = "/api/v4"

# Only the default account may fall back to these
ENV_BOT_TOKEN = "MATTERMOST_BOT_TOKEN"
ENV_BASE_URL = "MATTERMOST_URL"


def normalize_base_url(raw: Optional[str]) -> Optional[str]:
    """Strip whitespace, trailing slashes and a trailing `/api/v4`.

    Returns None when nothing usable is left.
    """
    trimmed = (raw or "").strip().rstrip("/")
    if trimmed.lower().endswith(API_PATH):
        trimmed = trimmed[: -len(API_PATH)].rstrip("/")
    return trimmed or None


def _section(host: HostConfig) -> MattermostConfig:
    return host.mattermost or MattermostConfig()


def list_account_ids(cfg: ConfigInput) -> List[str]:
    """Return configured account ids in configuration order.

    Falls back to `["default"]` when no named accounts are declared.
    """
    accounts = _section(load_host_config(cfg)).accounts or {}
    ids = [account_id for account_id in accounts if account_id.strip()]
    return ids or [DEFAULT_ACCOUNT_ID]


def resolve_default_account_id(cfg: ConfigInput) -> str:
    host = load_host_config(cfg)
    ids = list_account_ids(host)
    preferred = (_section(host).default_account or "").strip()
    if preferred and preferred in ids:
        return preferred
    if DEFAULT_ACCOUNT_ID in ids:
        return DEFAULT_ACCOUNT_ID
    return ids[0]


def _merged_settings(
    section: MattermostConfig, account_cfg: Optional[MattermostAccountConfig]
) -> Dict[str, Any]:
    base = section.model_dump(
        exclude={"accounts", "default_account", "actions"}, exclude_none=True
    )
    override = account_cfg.model_dump(exclude_none=True) if account_cfg else {}
    return {**base, **override}


def _credential(
    value: Any, account_id: str, env_name: str
) -> Tuple[str, CredentialSource]:
    configured = value.strip() if isinstance(value, str) else ""
    if configured:
        return configured, "config"
    if account_id == DEFAULT_ACCOUNT_ID:
        from_env = os.getenv(env_name, "").strip()
        if from_env:
            return from_env, "env"
    return "", "none"


def resolve_account(
    cfg: ConfigInput, account_id: Optional[str] = None
) -> ResolvedAccount:
    """Resolve one account by id, or the default account when id is blank.

    Raises:
        ConfigurationError: `account_id` names an account that is not configured.
    """
    host = load_host_config(cfg)
    section = _section(host)
    named = section.accounts or {}

    requested = (account_id or "").strip()
    resolved_id = requested or resolve_default_account_id(host)
    if resolved_id not in list_account_ids(host):
        raise ConfigurationError(f'Mattermost account "{resolved_id}" is not configured')

    account_cfg = named.get(resolved_id)
    settings = _merged_settings(section, account_cfg)
    enabled = section.enabled is not False and (
        account_cfg is None or account_cfg.enabled is not False
    )
    bot_token, token_source = _credential(settings.get("bot_token"), resolved_id, ENV_BOT_TOKEN)
    base_url, url_source = _credential(
        normalize_base_url(settings.get("base_url")), resolved_id, ENV_BASE_URL
    )
    base_url = normalize_base_url(base_url) or ""
    if not base_url:
        url_source = "none"

    return ResolvedAccount(
        account_id=resolved_id,
        enabled=enabled,
        name=settings.get("name"),
        bot_token=bot_token,
        base_url=base_url,
        bot_token_source=token_source,
        base_url_source=url_source,
        config=settings,
    )


def list_enabled_accounts(cfg: ConfigInput) -> List[ResolvedAccount]:
    """Return every enabled account that has both a token and a base URL."""
    host = load_host_config(cfg)
    usable: List[ResolvedAccount] = []
    for account_id in list_account_ids(host):
        account = resolve_account(host, account_id)
        if not account.enabled:
            continue
        if not account.is_configured:
            logger.debug("Skipping Mattermost account %s: missing token or baseUrl", account_id)
            continue
        usable.append(account)
    return usable
