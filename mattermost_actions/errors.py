from __future__ import annotations

from typing import Any, Optional


class MattermostActionError(Exception):
    """Base class for every error raised by the action adapter.

    Hosts can catch this single type; the HTTP layer maps each subclass to a
    status code.
    """


class ConfigurationError(MattermostActionError):
    """Account credentials or endpoint are missing, invalid, or disabled."""


class ValidationError(MattermostActionError, ValueError):
    """A required action parameter is missing or malformed.

    Raised before any remote call is attempted.
    """


class UnsupportedActionError(MattermostActionError):
    """The requested action name is not part of the supported set."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Action {action} is not supported for Mattermost.")


class RemoteApiError(MattermostActionError):
    """Non-2xx response or transport failure from the Mattermost API.

    Attributes:
        status_code: HTTP status from the server, or None for transport errors.
        detail: Parsed error body (dict) or raw text, when available.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        detail: Any = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)
