"""Stage answering static JSON-RPC methods locally."""

from typing import Any, Mapping, Optional

from ..api_types import JsonRpcRequest
from ..constants import FIXTURE_RESULTS
from ..providers.base import BaseSubprovider, NextStage
from ..types.network import NetworkConfig

__all__ = ["FixtureSubprovider"]


class FixtureSubprovider(BaseSubprovider):
    """
    Serves methods whose answers never change for a network.

    `eth_chainId` and `net_version` come from the network config, the rest
    from a static table. Everything else is passed down the pipeline.
    """

    def __init__(
        self,
        network: NetworkConfig,
        fixtures: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        self.fixtures = {
            **FIXTURE_RESULTS,
            "eth_chainId": hex(network.chain_id),
            "net_version": str(network.chain_id),
            **(fixtures or {}),
        }

    async def handle_request(self, call: JsonRpcRequest, next_stage: NextStage) -> Any:
        method = call["method"]
        if method in self.fixtures:
            self._logger.debug(f"Answered {method} from fixtures")
            return self.fixtures[method]
        return await next_stage()
