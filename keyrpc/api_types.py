"""JSON-RPC wire type definitions for keyrpc."""

from typing import Any, Optional, TypedDict, Union

__all__ = [
    "JsonRpcId",
    "JsonRpcRequest",
    "JsonRpcErrorBody",
    "JsonRpcResponse",
    "TokenResponse",
    "UserInfoClaims",
]

JsonRpcId = Union[int, str, None]


class _JsonRpcRequestBase(TypedDict):
    id: JsonRpcId
    jsonrpc: str
    method: str
    params: Any


class JsonRpcRequest(_JsonRpcRequestBase, total=False):
    """JSON-RPC call as it travels through a pipeline."""
    origin: str


class JsonRpcErrorBody(TypedDict, total=False):
    """The `error` member of a JSON-RPC response."""
    code: int
    message: str
    data: Any


class JsonRpcResponse(TypedDict, total=False):
    """JSON-RPC response envelope."""
    id: JsonRpcId
    jsonrpc: str
    result: Any
    error: JsonRpcErrorBody


class TokenResponse(TypedDict, total=False):
    """OAuth token endpoint response."""
    access_token: str
    token_type: str
    expires_in: int
    refresh_token: Optional[str]
    id_token: Optional[str]
    scope: str


class UserInfoClaims(TypedDict, total=False):
    """Claims returned by the userinfo endpoint."""
    sub: str
    accounts: list[str]
    email: str
