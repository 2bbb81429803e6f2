from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


CredentialSource = Literal["config", "env", "none"]


class ResolvedAccount(BaseModel):
    """One bot identity, resolved from host configuration for a single call.

    Attributes:
        account_id: Key of the account under `channels.mattermost.accounts`,
            or "default" for the integration-level account.
        bot_token: Personal access token of the bot user (may be empty).
        base_url: Server URL without trailing slashes or `/api/v4`; empty when
            nothing usable is configured.
        enabled: False when the integration or the account opts out.
        config: Merged per-account settings, including unknown keys.
        bot_token_source / base_url_source: Where the credential came from.
    """

    model_config = ConfigDict(frozen=True)

    account_id: str
    enabled: bool = True
    name: Optional[str] = None
    bot_token: str = ""
    base_url: str = ""
    bot_token_source: CredentialSource = "none"
    base_url_source: CredentialSource = "none"
    config: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token.strip() and self.base_url.strip())
