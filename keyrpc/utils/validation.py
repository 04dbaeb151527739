"""Validation utilities for keyrpc."""

import re
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from ..exceptions import ValidationError

__all__ = [
    "looks_like_url",
    "is_valid_rpc_url",
    "validate_rpc_url",
    "validate_chain_id",
    "validate_headers",
    "validate_polling_interval",
]

# Header field names are RFC 7230 tokens
HEADER_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def looks_like_url(value: str) -> bool:
    """Check whether a string contains a URL scheme delimiter."""
    return "://" in value


def is_valid_rpc_url(url: str) -> bool:
    """
    Check if a JSON-RPC endpoint URL is usable.

    Args:
        url: Endpoint URL

    Returns:
        True for absolute http(s) URLs, False otherwise
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_rpc_url(url: str) -> str:
    """
    Validate a JSON-RPC endpoint URL.

    Args:
        url: Endpoint URL

    Returns:
        The URL without trailing slash

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
    """
    if not isinstance(url, str) or not is_valid_rpc_url(url):
        raise ValidationError(f"Invalid RPC URL: {url!r}")
    return url.rstrip("/")


def validate_chain_id(chain_id: Any) -> int:
    """
    Validate a chain identifier.

    Raises:
        ValidationError: If chain_id is not a non-negative integer
    """
    if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 0:
        raise ValidationError(f"Invalid chain id: {chain_id!r}")
    return chain_id


def validate_polling_interval(interval: Any) -> float:
    """
    Validate a block polling interval in seconds.

    Raises:
        ValidationError: If interval is not a positive number
    """
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or not interval > 0:
        raise ValidationError(f"Invalid polling interval: {interval!r}")
    return float(interval)


def validate_headers(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """
    Validate extra HTTP headers and return them as a plain dict.

    Args:
        headers: Mapping of header name to value, or None

    Returns:
        Copy of the headers

    Raises:
        ValidationError: If a name is not a valid token or a value is not a string
    """
    if not headers:
        return {}

    validated = {}
    for name, value in headers.items():
        if not isinstance(name, str) or not HEADER_NAME_PATTERN.match(name):
            raise ValidationError(f"Invalid header name: {name!r}")
        if not isinstance(value, str) or "\n" in value or "\r" in value:
            raise ValidationError(f"Invalid value for header {name}: {value!r}")
        validated[name] = value
    return validated
