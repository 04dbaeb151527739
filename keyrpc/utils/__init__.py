"""Utility functions for keyrpc."""

from ..utils.validation import (
    looks_like_url,
    is_valid_rpc_url,
    validate_rpc_url,
    validate_chain_id,
    validate_headers,
    validate_polling_interval,
)

__all__ = [
    "looks_like_url",
    "is_valid_rpc_url",
    "validate_rpc_url",
    "validate_chain_id",
    "validate_headers",
    "validate_polling_interval",
]
