from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from server.app import app
from server.config import Settings, get_settings
from tests.fixtures.mattermost_payloads import MM_URL


_ENV_VARS = (
    "MATTERMOST_URL",
    "MATTERMOST_BOT_TOKEN",
    "MATTERMOST_TIMEOUT",
    "MATTERMOST_ACTIONS_REACTIONS",
    "MATTERMOST_ACTIONS_MESSAGES",
    "MATTERMOST_ACTIONS_PINS",
)


@pytest.fixture(autouse=True)
def test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "test")
    # Env credentials would leak into default-account resolution
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings() -> Settings:
    return Settings(mattermost_url=MM_URL, mattermost_bot_token="bot-tok")


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
