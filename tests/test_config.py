from unittest.mock import patch

import pytest

from keyrpc.config import Settings, load_settings
from keyrpc.constants import DEFAULT_API_BASE_URL, DEFAULT_STORAGE_NAMESPACE, DEFAULT_WEB_BASE_URL
from keyrpc.exceptions import ConfigError

ENV_VARS = (
    "KEYRPC_CLIENT_ID",
    "KEYRPC_REDIRECT_URI",
    "KEYRPC_WEB_BASE_URL",
    "KEYRPC_API_BASE_URL",
    "KEYRPC_STORAGE_NAMESPACE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    with patch("keyrpc.config.load_dotenv"):
        yield


def test_missing_client_id_raises():
    with pytest.raises(ConfigError, match="KEYRPC_CLIENT_ID"):
        load_settings()


def test_defaults(monkeypatch):
    monkeypatch.setenv("KEYRPC_CLIENT_ID", "abc")

    settings = load_settings()

    assert settings == Settings(client_id="abc")
    assert settings.redirect_uri is None
    assert settings.web_base_url == DEFAULT_WEB_BASE_URL
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.storage_namespace == DEFAULT_STORAGE_NAMESPACE


def test_overrides(monkeypatch):
    monkeypatch.setenv("KEYRPC_CLIENT_ID", "abc")
    monkeypatch.setenv("KEYRPC_REDIRECT_URI", "https://app.example/callback")
    monkeypatch.setenv("KEYRPC_WEB_BASE_URL", "https://auth.example")
    monkeypatch.setenv("KEYRPC_API_BASE_URL", "https://localhost:56610/v1")
    monkeypatch.setenv("KEYRPC_STORAGE_NAMESPACE", "myapp")

    settings = load_settings()

    assert settings.redirect_uri == "https://app.example/callback"
    assert settings.web_base_url == "https://auth.example"
    assert settings.api_base_url == "https://localhost:56610/v1"
    assert settings.storage_namespace == "myapp"


def test_settings_are_frozen(monkeypatch):
    monkeypatch.setenv("KEYRPC_CLIENT_ID", "abc")
    settings = load_settings()
    with pytest.raises(AttributeError):
        settings.client_id = "other"
