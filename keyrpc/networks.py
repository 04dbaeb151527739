"""Registry of well-known networks."""

import logging
from typing import Optional

from .constants import CHAIN_IDS, DEFAULT_API_BASE_URL, Network
from .exceptions import UnsupportedNetworkError
from .types.common import CanonicalNetworkKey
from .types.network import NetworkConfig
from .utils.validation import looks_like_url

__all__ = ["NetworkRegistry", "canonical_key"]

logger = logging.getLogger(__name__)


class NetworkRegistry:
    """
    Static table of the networks served by the hosted gateway.

    Endpoints are derived from the API base URL as `{api_base_url}/web3/{name}`.
    """

    def __init__(self, api_base_url: str = DEFAULT_API_BASE_URL) -> None:
        """
        Initialize the registry.

        Args:
            api_base_url: Base URL of the JSON-RPC gateway
        """
        self.api_base_url = api_base_url.rstrip("/")
        self._configs = {
            network.value: NetworkConfig(
                rpc_url=f"{self.api_base_url}/web3/{network.value}",
                chain_id=chain_id,
                name=network.value,
                hosted=True,
            )
            for network, chain_id in CHAIN_IDS.items()
        }

    @property
    def default(self) -> NetworkConfig:
        """The mainnet entry."""
        return self._configs[Network.MAINNET.value]

    @property
    def names(self) -> list[str]:
        """Registered network names."""
        return list(self._configs)

    def resolve(self, name: Optional[str] = None) -> NetworkConfig:
        """
        Resolve a network name to its configuration.

        Args:
            name: Network name (case-sensitive), None for mainnet

        Returns:
            Network configuration

        Raises:
            UnsupportedNetworkError: If the name is not registered
        """
        if name is None:
            return self.default

        config = self._configs.get(name)
        if config is None:
            logger.debug(f"Rejected network name {name!r}")
            raise UnsupportedNetworkError(name, looks_like_url=looks_like_url(name))
        return config

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __repr__(self) -> str:
        return f"NetworkRegistry(api_base_url={self.api_base_url!r})"


def canonical_key(config: NetworkConfig) -> CanonicalNetworkKey:
    """Return the cache key of a resolved network."""
    return config.key
