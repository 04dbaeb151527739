"""Common type definitions for keyrpc."""

from typing import Callable, NewType, Tuple, Union, Awaitable, Any

__all__ = [
    "ClientId",
    "ChainId",
    "RpcUrl",
    "BearerToken",
    "CanonicalNetworkKey",
    "SignOutHandler",
]

ClientId = NewType("ClientId", str)
"""OAuth client identifier, also sent as the API key."""

ChainId = NewType("ChainId", int)
"""EIP-155 chain identifier."""

RpcUrl = NewType("RpcUrl", str)
"""JSON-RPC endpoint URL."""

BearerToken = NewType("BearerToken", str)
"""OAuth access token."""

# ("network", name) for registry entries, ("custom", rpc_url, chain_id) otherwise
CanonicalNetworkKey = Tuple[Union[str, int], ...]
"""Cache key of a resolved network."""

SignOutHandler = Callable[[], Union[None, Awaitable[Any]]]
"""Callback run once per completed sign-out."""
