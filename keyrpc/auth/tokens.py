"""Token types and refresh-token persistence."""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from ..api_types import TokenResponse
from ..constants import DEFAULT_STORAGE_NAMESPACE
from ..exceptions import AuthorizationServerError
from ..types.common import BearerToken, ClientId

__all__ = [
    "AccessToken",
    "TokenSet",
    "Storage",
    "MemoryStorage",
    "JSONFileStorage",
    "TokenStore",
]

logger = logging.getLogger(__name__)

# Tokens this close to expiry are treated as expired
EXPIRY_LEEWAY = 30.0


@dataclass(frozen=True)
class AccessToken:
    """Bearer token with optional absolute expiry (epoch seconds)."""

    token: BearerToken
    expires_at: Optional[float] = None

    @classmethod
    def from_expires_in(cls, token: str, expires_in: Optional[int]) -> "AccessToken":
        expires_at = time.time() + expires_in if expires_in is not None else None
        return cls(BearerToken(token), expires_at)

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - EXPIRY_LEEWAY


@dataclass(frozen=True)
class TokenSet:
    """Tokens produced by a sign-in or refresh."""

    access_token: AccessToken
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_response(cls, data: TokenResponse) -> "TokenSet":
        """
        Parse an OAuth token endpoint response.

        Raises:
            AuthorizationServerError: If the response has no access token
        """
        if not data.get("access_token"):
            raise AuthorizationServerError("Token response has no access_token")
        return cls(
            access_token=AccessToken.from_expires_in(data["access_token"], data.get("expires_in")),
            refresh_token=data.get("refresh_token"),
            id_token=data.get("id_token"),
            scope=data.get("scope"),
        )


class Storage(Protocol):
    """Key/value storage for session state."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class JSONFileStorage:
    """
    Storage persisted as a flat JSON object in a file.

    The file is re-read on every access so several processes can share it.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Ignoring corrupt session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class TokenStore:
    """Reads and writes the refresh token of one client."""

    def __init__(
        self,
        client_id: ClientId,
        storage: Optional[Storage] = None,
        namespace: str = DEFAULT_STORAGE_NAMESPACE,
    ) -> None:
        self.client_id = client_id
        self.storage = storage if storage is not None else MemoryStorage()
        self.namespace = namespace

    @property
    def refresh_token_key(self) -> str:
        return f"{self.namespace}.refresh_token.{self.client_id}"

    def get_refresh_token(self) -> Optional[str]:
        return self.storage.get_item(self.refresh_token_key) or None

    def set_refresh_token(self, refresh_token: str) -> None:
        self.storage.set_item(self.refresh_token_key, refresh_token)

    def clear_refresh_token(self) -> None:
        self.storage.remove_item(self.refresh_token_key)
