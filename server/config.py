"""Configuration for the Mattermost actions server."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from mattermost_actions.config import HostConfig


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.is_file():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#") and "=" in stripped:
            key, value = stripped.split("=", 1)
            key, value = key.strip(), value.strip().strip("'\"")
            if key and value and key not in os.environ:
                os.environ[key] = value


_load_env_file()


DEFAULT_APP_NAME = "Mattermost Actions"
DEFAULT_APP_VERSION = "0.1.0"


def _env_int(name: str, fallback: int) -> int:
    try:
        return int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_float(name: str, fallback: float) -> float:
    try:
        return float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_gate(name: str) -> Optional[bool]:
    """Unset means "use the default"; only an explicit off value disables."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() not in {"0", "false", "no", "off"}


class Settings(BaseModel):
    """Server settings read from the environment."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default_factory=lambda: os.getenv("MM_ACTIONS_HOST", "0.0.0.0"))
    server_port: int = Field(default_factory=lambda: _env_int("MM_ACTIONS_PORT", 8000))

    # Environment
    env: str = Field(default_factory=lambda: os.getenv("ENV", "dev"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))
    enable_docs: bool = Field(
        default_factory=lambda: os.getenv("MM_ACTIONS_ENABLE_DOCS", "1") != "0"
    )
    docs_url: Optional[str] = Field(default_factory=lambda: os.getenv("DOCS_URL", "/docs"))

    # Mattermost account
    mattermost_url: str = Field(default_factory=lambda: os.getenv("MATTERMOST_URL", ""))
    mattermost_bot_token: str = Field(
        default_factory=lambda: os.getenv("MATTERMOST_BOT_TOKEN", "")
    )
    mattermost_timeout: float = Field(
        default_factory=lambda: _env_float("MATTERMOST_TIMEOUT", 15.0)
    )

    # Action gates
    actions_reactions: Optional[bool] = Field(
        default_factory=lambda: _env_gate("MATTERMOST_ACTIONS_REACTIONS")
    )
    actions_messages: Optional[bool] = Field(
        default_factory=lambda: _env_gate("MATTERMOST_ACTIONS_MESSAGES")
    )
    actions_pins: Optional[bool] = Field(
        default_factory=lambda: _env_gate("MATTERMOST_ACTIONS_PINS")
    )

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None

    def host_config(self) -> HostConfig:
        """Build the adapter configuration for the single env-configured account."""
        return HostConfig.model_validate(
            {
                "channels": {
                    "mattermost": {
                        "botToken": self.mattermost_bot_token,
                        "baseUrl": self.mattermost_url,
                        "timeoutSeconds": self.mattermost_timeout,
                        "actions": {
                            "reactions": self.actions_reactions,
                            "messages": self.actions_messages,
                            "pins": self.actions_pins,
                        },
                    }
                }
            }
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
