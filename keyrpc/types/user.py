"""User profile type definitions for keyrpc."""

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..exceptions import AuthenticationError

__all__ = ["User"]


@dataclass(frozen=True)
class User:
    """Signed-in user: subject identifier and account list."""

    id: str
    accounts: tuple[str, ...] = ()
    claims: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "User":
        """
        Build a user from userinfo claims.

        Args:
            claims: Decoded userinfo response; `sub` is required

        Returns:
            User instance

        Raises:
            AuthenticationError: If the claims have no `sub`
        """
        if "sub" not in claims:
            raise AuthenticationError("userinfo response has no 'sub' claim")
        return cls(
            id=str(claims["sub"]),
            accounts=tuple(claims.get("accounts") or ()),
            claims=dict(claims),
        )
