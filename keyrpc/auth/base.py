"""Token source interface shared by the transport and the session layer."""

from typing import Protocol, runtime_checkable

from ..types.common import BearerToken

__all__ = ["AccessTokenProvider"]


@runtime_checkable
class AccessTokenProvider(Protocol):
    """Supplies bearer tokens for authenticated JSON-RPC calls."""

    async def get_access_token(self) -> BearerToken:
        """
        Return a usable access token.

        Raises:
            AuthenticationError: If there is no active session
        """
        ...

    async def invalidate_token(self) -> None:
        """Mark the current access token as unusable."""
        ...
