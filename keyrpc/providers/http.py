"""Authenticated HTTP transport stage for keyrpc."""

import asyncio
import json
import logging
from typing import AbstractSet, Any, Mapping, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..api_types import JsonRpcRequest
from ..auth.base import AccessTokenProvider
from ..constants import (
    AUTHENTICATED_METHODS,
    AUTHORIZATION_ERROR_PATTERN,
    DEFAULT_TIMEOUT,
    MAX_ATTEMPTS,
    RETRY_DELAY,
    USER_AGENT,
)
from ..exceptions import (
    RetryExhaustedError,
    TokenUnavailableError,
    TransientTransportError,
    UpstreamApplicationError,
)
from ..providers.base import BaseSubprovider, NextStage
from ..types.common import BearerToken

__all__ = ["AuthenticatedFetchSubprovider"]

logger = logging.getLogger(__name__)


class AuthenticatedFetchSubprovider(BaseSubprovider):
    """
    Terminal pipeline stage performing the JSON-RPC exchange over HTTP.

    Calls whose method is in `authenticated_methods` carry a bearer token
    from the token provider. Network failures are retried with exponential
    backoff; JSON-RPC errors are raised immediately, and authorization
    errors additionally invalidate the cached token.
    """

    def __init__(
        self,
        rpc_url: str,
        token_provider: Optional[AccessTokenProvider] = None,
        headers: Optional[Mapping[str, str]] = None,
        additional_headers: Optional[Mapping[str, str]] = None,
        authenticated_methods: AbstractSet[str] = AUTHENTICATED_METHODS,
        origin_header_key: Optional[str] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[ClientSession] = None,
        proxy: Optional[str] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            rpc_url: JSON-RPC endpoint
            token_provider: Source of bearer tokens
            headers: Headers sent with every request (API key for hosted networks)
            additional_headers: Caller headers, applied last
            authenticated_methods: Methods that need a bearer token
            origin_header_key: Header that carries a call's `origin`, if any
            max_attempts: Total attempts for transient failures
            retry_delay: Delay before the second attempt, doubled afterwards
            timeout: Request timeout in seconds
            session: Existing aiohttp session to use
            proxy: Proxy URL for requests
        """
        super().__init__()
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.rpc_url = rpc_url
        self.token_provider = token_provider
        self.authenticated_methods = frozenset(authenticated_methods)
        self.origin_header_key = origin_header_key
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = ClientTimeout(total=timeout)
        self.proxy = proxy

        self.headers = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            **(headers or {}),
        }
        self.additional_headers = dict(additional_headers or {})

        # Session management
        self._session = session
        self._owns_session = session is None
        self._background_tasks: set[asyncio.Task] = set()

    def requires_authentication(self, method: str) -> bool:
        """Check whether a method needs a bearer token."""
        return method in self.authenticated_methods

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-indexed)."""
        return self.retry_delay * (2 ** (attempt - 1))

    def build_headers(
        self,
        call: JsonRpcRequest,
        access_token: Optional[BearerToken] = None,
    ) -> dict[str, str]:
        """
        Compose the headers for one HTTP attempt.

        Args:
            call: JSON-RPC request
            access_token: Token to send as bearer credentials

        Returns:
            Header mapping
        """
        headers = dict(self.headers)
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        origin = call.get("origin")
        if self.origin_header_key and origin:
            headers[self.origin_header_key] = origin
        headers.update(self.additional_headers)
        return headers

    async def handle_request(self, call: JsonRpcRequest, next_stage: NextStage) -> Any:
        return await self.send_request(call)

    async def send_request(self, call: JsonRpcRequest) -> Any:
        """
        Send a JSON-RPC call and return its result.

        Args:
            call: JSON-RPC request

        Returns:
            The `result` member of the response

        Raises:
            TokenUnavailableError: If a required token could not be fetched
            UpstreamApplicationError: If the endpoint answered with an error
            RetryExhaustedError: If every attempt failed transiently
        """
        method = call["method"]
        access_token = None
        if self.requires_authentication(method):
            access_token = await self._fetch_token(method)

        last_error: Optional[TransientTransportError] = None
        for attempt in range(1, self.max_attempts + 1):
            headers = self.build_headers(call, access_token)
            try:
                status, body = await self._post(call, headers)
                return self._parse_response(status, body)

            except UpstreamApplicationError as e:
                if e.is_authorization_error:
                    self._schedule_invalidation()
                raise

            except TransientTransportError as e:
                last_error = e
                if attempt == self.max_attempts:
                    break

                delay = self.backoff_delay(attempt)
                self._logger.warning(
                    f"{method} failed (attempt {attempt}/{self.max_attempts}): {e}; "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

        self._logger.error(f"{method} failed after {self.max_attempts} attempts")
        raise RetryExhaustedError(self.max_attempts) from last_error

    async def _fetch_token(self, method: str) -> BearerToken:
        """Fetch the bearer token for an authenticated call."""
        if self.token_provider is None:
            raise TokenUnavailableError(f"{method} requires an access token provider")
        try:
            return await self.token_provider.get_access_token()
        except Exception as e:
            self._logger.debug(f"No access token for {method}: {e}")
            raise TokenUnavailableError(str(e)) from e

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _post(
        self,
        call: JsonRpcRequest,
        headers: Mapping[str, str],
    ) -> tuple[int, str]:
        """Make one HTTP attempt, returning status and body text."""
        session = await self._get_session()
        try:
            self._logger.debug(f"Request: POST {self.rpc_url} method={call['method']}")

            async with session.post(
                self.rpc_url,
                json=call,
                headers=dict(headers),
                proxy=self.proxy,
            ) as response:
                self._logger.debug(f"Response: {response.status}")
                return response.status, await response.text()

        except asyncio.TimeoutError as e:
            raise TransientTransportError("Request timed out") from e
        except aiohttp.ClientError as e:
            raise TransientTransportError(f"Network error: {e}") from e

    def _parse_response(self, status: int, body: str) -> Any:
        """Classify an HTTP response and extract the JSON-RPC result."""
        try:
            data = json.loads(body)
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("error") is not None:
            raise self._application_error(data["error"], status)

        if status == 429 or status >= 500:
            raise TransientTransportError(f"Server error {status}: {body[:200]}", code=status)

        if status >= 400:
            raise UpstreamApplicationError(
                f"Client error {status}: {body[:200]}",
                code=status,
                is_authorization_error=status in (401, 403),
            )

        if not isinstance(data, dict) or "result" not in data:
            raise UpstreamApplicationError(f"Malformed JSON-RPC response: {body[:200]}")

        return data["result"]

    @staticmethod
    def _application_error(error: Any, status: int) -> UpstreamApplicationError:
        if isinstance(error, dict):
            message = str(error.get("message") or "Unknown JSON-RPC error")
            code = error.get("code")
            data = error.get("data")
        else:
            message, code, data = str(error), None, None

        is_auth = status in (401, 403) or bool(AUTHORIZATION_ERROR_PATTERN.search(message))
        return UpstreamApplicationError(
            message,
            code=code,
            data=data,
            is_authorization_error=is_auth,
        )

    def _schedule_invalidation(self) -> None:
        """Invalidate the token in the background; the call's error is raised meanwhile."""
        task = asyncio.ensure_future(self._invalidate_token())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _invalidate_token(self) -> None:
        if self.token_provider is None:
            return
        try:
            await self.token_provider.invalidate_token()
            self._logger.info("Access token invalidated after authorization failure")
        except Exception as e:
            self._logger.error(f"Token invalidation failed: {e}")

    async def close(self) -> None:
        """Close the HTTP session if this stage created it."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rpc_url={self.rpc_url!r})"
