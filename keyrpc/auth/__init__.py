"""Session and OAuth support for keyrpc."""

from ..auth.base import AccessTokenProvider
from ..auth.oauth import Navigator, OAuthManager, SignInMethod
from ..auth.provider import AuthenticationStatus, AuthProvider
from ..auth.tokens import (
    AccessToken,
    JSONFileStorage,
    MemoryStorage,
    Storage,
    TokenSet,
    TokenStore,
)

__all__ = [
    "AccessTokenProvider",
    "AuthProvider",
    "AuthenticationStatus",
    "Navigator",
    "OAuthManager",
    "SignInMethod",
    "AccessToken",
    "TokenSet",
    "Storage",
    "MemoryStorage",
    "JSONFileStorage",
    "TokenStore",
]
