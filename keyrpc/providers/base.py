"""Base pipeline stage interface for keyrpc."""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable
import logging

from ..api_types import JsonRpcRequest

__all__ = ["BaseSubprovider", "NextStage"]

logger = logging.getLogger(__name__)

NextStage = Callable[[], Awaitable[Any]]
"""Continuation that hands the call to the following stage."""


class BaseSubprovider(ABC):
    """
    Abstract pipeline stage.

    A stage either answers a call itself (returning a result or raising)
    or delegates to the rest of the pipeline by awaiting `next_stage()`.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def handle_request(
        self,
        call: JsonRpcRequest,
        next_stage: NextStage,
    ) -> Any:
        """
        Process one JSON-RPC call.

        Args:
            call: JSON-RPC request object
            next_stage: Continuation for calls this stage does not answer

        Returns:
            The `result` member for the call

        Raises:
            ProviderError: If the call fails
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources held by the stage."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
