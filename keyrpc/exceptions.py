"""keyrpc exceptions hierarchy."""

from typing import Any, Optional

__all__ = [
    "KeyRPCError",
    "ConfigError",
    "ValidationError",
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


class KeyRPCError(Exception):
    """Base exception for all keyrpc errors."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(KeyRPCError):
    """Raised when required configuration is missing."""
    pass


class ValidationError(KeyRPCError):
    """Raised when validation fails."""
    pass


class ProviderError(KeyRPCError):
    """Raised when a provider or one of its stages encounters an error."""
    pass


class UnsupportedNetworkError(ProviderError):
    """Raised when a network name is not in the registry."""

    def __init__(self, name: str, looks_like_url: bool = False) -> None:
        if looks_like_url:
            message = (
                f"Unsupported network name '{name}'. To connect to a custom "
                f"endpoint pass ProviderOptions(network=NetworkConfig(...))"
            )
        else:
            message = f"Unsupported network: '{name}'"
        super().__init__(message)
        self.name = name
        self.looks_like_url = looks_like_url


class TokenUnavailableError(ProviderError):
    """Raised when an access token could not be fetched for a request."""
    pass


class UpstreamApplicationError(ProviderError):
    """Raised when the endpoint answers with a JSON-RPC error."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Optional[Any] = None,
        is_authorization_error: bool = False,
    ) -> None:
        super().__init__(message, code=code, data=data)
        self.is_authorization_error = is_authorization_error


class TransientTransportError(ProviderError):
    """Raised when network communication fails and may be retried."""
    pass


class RetryExhaustedError(ProviderError):
    """Raised when every attempt of a request failed transiently."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"All retries exhausted after {attempts} attempts")
        self.attempts = attempts


class AuthenticationError(KeyRPCError):
    """Raised when sign-in or session handling fails."""
    pass


class AuthorizationServerError(AuthenticationError):
    """Raised when the authorization server is unreachable or answers unusably."""
    pass


class NotSignedInError(AuthenticationError):
    """Raised when an operation needs a session and none is active."""

    def __init__(self, message: str = "Not signed in") -> None:
        super().__init__(message)
