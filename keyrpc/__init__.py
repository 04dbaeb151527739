"""
keyrpc

Authenticated access to blockchain JSON-RPC endpoints with an OAuth-backed
user session.
"""

from .auth import (
    AccessTokenProvider,
    AuthenticationStatus,
    AuthProvider,
    JSONFileStorage,
    MemoryStorage,
    Navigator,
    OAuthManager,
    SignInMethod,
    TokenSet,
)
from .client import KeyRPC
from .config import Settings, load_settings
from .constants import Network
from .engine import ProviderEngine
from .exceptions import (
    KeyRPCError,
    ConfigError,
    ProviderError,
    UnsupportedNetworkError,
    TokenUnavailableError,
    UpstreamApplicationError,
    TransientTransportError,
    RetryExhaustedError,
    AuthenticationError,
    AuthorizationServerError,
    NotSignedInError,
)
from .manager import ProviderEngineManager
from .networks import NetworkRegistry
from .providers import AuthenticatedFetchSubprovider
from .types import NetworkConfig, ProviderOptions, User

__version__ = "1.0.0"

__all__ = [
    # Main client
    "KeyRPC",
    "Settings",
    "load_settings",

    # Networks and providers
    "Network",
    "NetworkConfig",
    "NetworkRegistry",
    "ProviderOptions",
    "ProviderEngine",
    "ProviderEngineManager",
    "AuthenticatedFetchSubprovider",

    # Session
    "AccessTokenProvider",
    "AuthProvider",
    "AuthenticationStatus",
    "JSONFileStorage",
    "MemoryStorage",
    "Navigator",
    "OAuthManager",
    "SignInMethod",
    "TokenSet",
    "User",

    # Exceptions
    "KeyRPCError",
    "ConfigError",
    "ProviderError",
    "UnsupportedNetworkError",
    "TokenUnavailableError",
    "UpstreamApplicationError",
    "TransientTransportError",
    "RetryExhaustedError",
    "AuthenticationError",
    "AuthorizationServerError",
    "NotSignedInError",
]
