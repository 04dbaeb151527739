"""Type definitions for keyrpc."""

# Common types
from ..types.common import (
    ClientId,
    ChainId,
    RpcUrl,
    BearerToken,
    CanonicalNetworkKey,
    SignOutHandler,
)

# Network types
from ..types.network import (
    NetworkConfig,
    ProviderOptions,
    ProviderIdentifier,
)

# Session types
from ..types.user import User

__all__ = [
    # Common
    "ClientId",
    "ChainId",
    "RpcUrl",
    "BearerToken",
    "CanonicalNetworkKey",
    "SignOutHandler",

    # Network
    "NetworkConfig",
    "ProviderOptions",
    "ProviderIdentifier",

    # Session
    "User",
]
