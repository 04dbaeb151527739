"""Per-network provider engine cache."""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Mapping, Optional

from .auth.base import AccessTokenProvider
from .constants import CLIENT_ID_HEADER, DEFAULT_POLLING_INTERVAL, MAX_ATTEMPTS, RETRY_DELAY
from .engine import ProviderEngine
from .networks import NetworkRegistry, canonical_key
from .providers.fixture import FixtureSubprovider
from .providers.http import AuthenticatedFetchSubprovider
from .types.common import CanonicalNetworkKey, ClientId
from .types.network import NetworkConfig, ProviderIdentifier, ProviderOptions

__all__ = ["ProviderEngineManager"]

logger = logging.getLogger(__name__)


class ProviderEngineManager:
    """
    Creates and caches one engine per canonical network key.

    The cache belongs to one SDK instance. Entries are added by
    `get_provider` and stopped, never removed, by `stop_all`.
    """

    def __init__(
        self,
        client_id: ClientId,
        token_provider: AccessTokenProvider,
        registry: Optional[NetworkRegistry] = None,
        web_base_url: Optional[str] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        origin_header_key: Optional[str] = None,
    ) -> None:
        """
        Initialize manager.

        Args:
            client_id: Client identifier sent as API key to hosted networks
            token_provider: Token source handed to every transport
            registry: Network registry (default: hosted networks)
            web_base_url: Default session base URL recorded on engines
            max_attempts: Transport attempt ceiling
            retry_delay: Transport base backoff delay in seconds
            origin_header_key: Header carrying a call's origin, if any
        """
        self.client_id = client_id
        self.token_provider = token_provider
        self.registry = registry or NetworkRegistry()
        self.web_base_url = web_base_url
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.origin_header_key = origin_header_key
        self._engines: dict[CanonicalNetworkKey, ProviderEngine] = {}

    @property
    def engines(self) -> Mapping[CanonicalNetworkKey, ProviderEngine]:
        """Read-only view of the cache."""
        return MappingProxyType(self._engines)

    def get_provider(self, identifier: ProviderIdentifier = None) -> ProviderEngine:
        """
        Return the engine for a network, creating and starting it on first use.

        Args:
            identifier: Network name, ProviderOptions, option mapping, or None for mainnet

        Returns:
            Cached engine for the resolved network

        Raises:
            UnsupportedNetworkError: If a network name is unknown
        """
        options = self._coerce_options(identifier)
        network = self._resolve_network(options)
        key = canonical_key(network)

        engine = self._engines.get(key)
        if engine is not None:
            return engine

        engine = self._create_engine(network, options)
        self._engines[key] = engine
        engine.start()
        logger.info(f"Created provider engine for {key}")
        return engine

    def stop_all(self) -> None:
        """Stop block polling on every cached engine, keeping them cached."""
        for engine in self._engines.values():
            engine.stop()

    async def close_all(self) -> None:
        """Stop every engine and release its HTTP resources."""
        for engine in self._engines.values():
            await engine.close()

    @staticmethod
    def _coerce_options(identifier: ProviderIdentifier) -> ProviderOptions:
        if identifier is None:
            return ProviderOptions()
        if isinstance(identifier, str):
            return ProviderOptions(network_name=identifier)
        if isinstance(identifier, ProviderOptions):
            return identifier
        if isinstance(identifier, Mapping):
            return ProviderOptions.from_dict(identifier)
        raise TypeError(f"Unsupported provider identifier: {identifier!r}")

    def _resolve_network(self, options: ProviderOptions) -> NetworkConfig:
        if options.network is not None:
            # Inline configs never count as hosted, whatever their name
            if options.network.hosted:
                return replace(options.network, hosted=False)
            return options.network
        return self.registry.resolve(options.network_name)

    def _create_engine(self, network: NetworkConfig, options: ProviderOptions) -> ProviderEngine:
        # Custom endpoints may belong to third parties: no API key for them
        headers = {} if network.is_custom else {CLIENT_ID_HEADER: self.client_id}
        polling_interval = (
            options.polling_interval
            if options.polling_interval is not None
            else DEFAULT_POLLING_INTERVAL
        )

        transport = AuthenticatedFetchSubprovider(
            rpc_url=network.rpc_url,
            token_provider=self.token_provider,
            headers=headers,
            additional_headers=options.additional_headers,
            origin_header_key=self.origin_header_key,
            max_attempts=self.max_attempts,
            retry_delay=self.retry_delay,
        )
        return ProviderEngine(
            network=network,
            stages=[FixtureSubprovider(network), transport],
            polling_interval=polling_interval,
            rpc_headers={**headers, **options.additional_headers},
            web_base_url=options.web_base_url or self.web_base_url,
        )

    def __len__(self) -> int:
        return len(self._engines)
