"""Request pipeline and block tracker."""

import asyncio
import itertools
import logging
from collections import defaultdict
from typing import Any, Callable, Optional

from .api_types import JsonRpcRequest, JsonRpcResponse
from .constants import DEFAULT_POLLING_INTERVAL
from .exceptions import ProviderError
from .providers.base import BaseSubprovider
from .types.network import NetworkConfig
from .utils.validation import validate_polling_interval

__all__ = ["BlockTracker", "ProviderEngine"]

logger = logging.getLogger(__name__)


class BlockTracker:
    """
    Polls `eth_blockNumber` through an engine and emits `block` on change.

    Polling failures are emitted as `error` events and never stop the loop.
    """

    def __init__(
        self,
        engine: "ProviderEngine",
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        self._engine = engine
        self._polling_interval = validate_polling_interval(polling_interval)
        self._is_running = False
        self._task: Optional[asyncio.Task] = None
        self.current_block: Optional[str] = None
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def polling_interval(self) -> float:
        return self._polling_interval

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        """
        Start polling.

        Outside a running event loop the tracker is only marked as running;
        the loop task is created by `ensure_polling` on the first request.
        """
        self._is_running = True
        self.ensure_polling()

    def ensure_polling(self) -> None:
        """Create the polling task if running and the loop is available."""
        if not self._is_running or (self._task is not None and not self._task.done()):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._task = loop.create_task(self._poll_loop())

    def stop(self) -> None:
        """Stop polling and cancel the loop task."""
        self._is_running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _poll_loop(self) -> None:
        while self._is_running:
            await asyncio.sleep(self._polling_interval)
            if not self._is_running:
                break
            await self.poll_once()

    async def poll_once(self) -> Optional[str]:
        """Fetch the latest block number, emitting `block` when it changed."""
        try:
            block_number = await self._engine.request("eth_blockNumber", [])
        except Exception as e:
            self._logger.debug(f"Block poll failed: {e}")
            return None

        if block_number != self.current_block:
            self.current_block = block_number
            self._engine.emit("block", block_number)
        return block_number


class ProviderEngine:
    """
    Ordered chain of stages serving one network.

    Each call is handed to the first stage; a stage answers it or passes it
    on. Errors are emitted to `error` observers and raised to the caller.
    Observers only report; nothing here stops the engine on error.
    """

    def __init__(
        self,
        network: NetworkConfig,
        stages: Optional[list[BaseSubprovider]] = None,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        rpc_headers: Optional[dict[str, str]] = None,
        web_base_url: Optional[str] = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            network: Network the engine serves
            stages: Initial stages, in dispatch order
            polling_interval: Seconds between block polls
            rpc_headers: Headers the transport stage was configured with
            web_base_url: Session base URL associated with this provider
        """
        self.network = network
        self.rpc_headers = dict(rpc_headers or {})
        self.web_base_url = web_base_url
        self._stages: list[BaseSubprovider] = list(stages or [])
        self._callbacks: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._ids = itertools.count(1)
        self._block_tracker = BlockTracker(self, polling_interval)
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def stages(self) -> tuple[BaseSubprovider, ...]:
        return tuple(self._stages)

    @property
    def block_tracker(self) -> BlockTracker:
        return self._block_tracker

    @property
    def polling_interval(self) -> float:
        return self._block_tracker.polling_interval

    @property
    def is_running(self) -> bool:
        return self._block_tracker.is_running

    def add_stage(self, stage: BaseSubprovider) -> None:
        """Append a stage to the end of the pipeline."""
        self._stages.append(stage)

    def start(self) -> None:
        """Start background block polling."""
        self._block_tracker.start()
        self._logger.info(f"Started engine for {self._describe()}")

    def stop(self) -> None:
        """Stop background block polling. The engine can still serve calls."""
        self._block_tracker.stop()
        self._logger.info(f"Stopped engine for {self._describe()}")

    async def close(self) -> None:
        """Stop and release resources held by the stages."""
        self.stop()
        for stage in self._stages:
            await stage.close()

    # Events
    def on(self, event: str, callback: Callable[..., Any]) -> None:
        """Register an observer for `error` or `block` events."""
        self._callbacks[event].append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        """Remove an observer; unknown observers are ignored."""
        callbacks = self._callbacks.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, *args: Any) -> None:
        """Invoke observers of an event. Observer failures are logged."""
        for callback in list(self._callbacks.get(event, [])):
            try:
                callback(*args)
            except Exception as e:
                self._logger.error(f"{event} observer error: {e}")

    # Requests
    async def send(self, call: JsonRpcRequest) -> JsonRpcResponse:
        """
        Dispatch a JSON-RPC call through the stages.

        Args:
            call: JSON-RPC request

        Returns:
            Response envelope with the call's id and result

        Raises:
            ProviderError: If a stage fails or no stage answers
        """
        self._block_tracker.ensure_polling()
        try:
            result = await self._dispatch(call, 0)
        except Exception as e:
            self.emit("error", e)
            raise
        return {"id": call.get("id"), "jsonrpc": "2.0", "result": result}

    async def request(self, method: str, params: Any = None) -> Any:
        """
        Call a JSON-RPC method and return its result.

        Args:
            method: JSON-RPC method name
            params: Method parameters

        Returns:
            The method's result
        """
        call: JsonRpcRequest = {
            "id": next(self._ids),
            "jsonrpc": "2.0",
            "method": method,
            "params": params if params is not None else [],
        }
        response = await self.send(call)
        return response["result"]

    async def _dispatch(self, call: JsonRpcRequest, index: int) -> Any:
        if index >= len(self._stages):
            raise ProviderError(f"No stage handled {call['method']}")
        stage = self._stages[index]
        return await stage.handle_request(call, lambda: self._dispatch(call, index + 1))

    def _describe(self) -> str:
        return self.network.name or f"{self.network.rpc_url} (chain {self.network.chain_id})"

    def __repr__(self) -> str:
        return (
            f"<ProviderEngine network={self._describe()} "
            f"stages={len(self._stages)} running={self.is_running}>"
        )
