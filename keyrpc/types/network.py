"""Network and provider option type definitions for keyrpc."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..types.common import CanonicalNetworkKey, ChainId, RpcUrl
from ..utils.validation import (
    validate_chain_id,
    validate_headers,
    validate_polling_interval,
    validate_rpc_url,
)

__all__ = [
    "NetworkConfig",
    "ProviderOptions",
    "ProviderIdentifier",
]


@dataclass(frozen=True)
class NetworkConfig:
    """Connection settings of one JSON-RPC network."""

    rpc_url: RpcUrl
    chain_id: ChainId
    name: Optional[str] = None
    hosted: bool = field(default=False, kw_only=True)  # set only by NetworkRegistry

    def __post_init__(self) -> None:
        object.__setattr__(self, "rpc_url", RpcUrl(validate_rpc_url(self.rpc_url)))
        object.__setattr__(self, "chain_id", ChainId(validate_chain_id(self.chain_id)))

    @property
    def is_custom(self) -> bool:
        """True when the config did not come from the network registry."""
        return not self.hosted

    @property
    def key(self) -> CanonicalNetworkKey:
        """Canonical cache key for this network."""
        if self.hosted and self.name is not None:
            return ("network", self.name)
        return ("custom", self.rpc_url, self.chain_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NetworkConfig":
        """Create from a mapping with `rpc_url` and `chain_id` keys."""
        return cls(
            rpc_url=data["rpc_url"],
            chain_id=data["chain_id"],
            name=data.get("name"),
        )


@dataclass
class ProviderOptions:
    """
    Options accepted by `get_provider`.

    `network` bypasses the registry; otherwise `network_name` is looked up
    and an absent name means mainnet. `polling_interval` is in seconds.
    """

    network_name: Optional[str] = None
    network: Optional[NetworkConfig] = None
    polling_interval: Optional[float] = None
    web_base_url: Optional[str] = None
    additional_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.network, Mapping):
            self.network = NetworkConfig.from_dict(self.network)
        self.additional_headers = validate_headers(self.additional_headers)
        if self.polling_interval is not None:
            self.polling_interval = validate_polling_interval(self.polling_interval)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProviderOptions":
        """Create from a mapping of option names."""
        unknown = set(data) - {
            "network_name",
            "network",
            "polling_interval",
            "web_base_url",
            "additional_headers",
        }
        if unknown:
            raise TypeError(f"Unknown provider options: {', '.join(sorted(unknown))}")
        return cls(**data)


ProviderIdentifier = Union[str, ProviderOptions, Mapping[str, Any], None]
"""Anything `get_provider` can resolve."""
