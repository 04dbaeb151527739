"""Environment configuration loading."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .constants import DEFAULT_API_BASE_URL, DEFAULT_STORAGE_NAMESPACE, DEFAULT_WEB_BASE_URL
from .exceptions import ConfigError


@dataclass(frozen=True)
class Settings:
    client_id: str
    redirect_uri: Optional[str] = None
    web_base_url: str = DEFAULT_WEB_BASE_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    storage_namespace: str = DEFAULT_STORAGE_NAMESPACE


def load_settings() -> Settings:
    """Load SDK settings from environment variables (and a .env file).

    Raises ConfigError if KEYRPC_CLIENT_ID is not set.
    """
    load_dotenv()

    client_id = os.environ.get("KEYRPC_CLIENT_ID", "")
    if not client_id:
        raise ConfigError("KEYRPC_CLIENT_ID environment variable is required")

    return Settings(
        client_id=client_id,
        redirect_uri=os.environ.get("KEYRPC_REDIRECT_URI") or None,
        web_base_url=os.environ.get("KEYRPC_WEB_BASE_URL", DEFAULT_WEB_BASE_URL),
        api_base_url=os.environ.get("KEYRPC_API_BASE_URL", DEFAULT_API_BASE_URL),
        storage_namespace=os.environ.get(
            "KEYRPC_STORAGE_NAMESPACE",
            DEFAULT_STORAGE_NAMESPACE,
        ),
    )
