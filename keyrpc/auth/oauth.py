"""OAuth session manager."""

import asyncio
import logging
import secrets
from enum import Enum
from typing import Any, Optional, Protocol, Sequence
from urllib.parse import urlencode

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..api_types import UserInfoClaims
from ..constants import DEFAULT_SCOPES, DEFAULT_TIMEOUT, DEFAULT_WEB_BASE_URL, USER_AGENT
from ..exceptions import AuthenticationError, AuthorizationServerError
from ..auth.tokens import TokenSet
from ..types.common import BearerToken, ClientId

__all__ = ["SignInMethod", "Navigator", "OAuthManager"]

logger = logging.getLogger(__name__)


class SignInMethod(str, Enum):
    """Interactive sign-in styles."""

    POPUP = "popup"
    REDIRECT = "redirect"


class Navigator(Protocol):
    """
    Application side of interactive sign-in.

    The navigator shows the authorization page and completes the code
    exchange, handing back finished token sets.
    """

    async def open_popup(self, url: str) -> TokenSet:
        """Show `url` in a popup and return the tokens once the user finishes."""
        ...

    async def redirect(self, url: str) -> None:
        """Navigate away to `url`."""
        ...

    async def complete_redirect(self, callback_url: str) -> TokenSet:
        """Finish a redirect sign-in from the URL the user returned to."""
        ...

    async def end_session(self, url: str) -> None:
        """Visit the end-session `url`."""
        ...


class OAuthManager:
    """
    Talks to the OAuth authorization server.

    Token refresh and userinfo go over HTTP; popup, redirect and
    end-session navigation are delegated to a `Navigator`.
    """

    def __init__(
        self,
        client_id: ClientId,
        redirect_uri: Optional[str] = None,
        web_base_url: str = DEFAULT_WEB_BASE_URL,
        scopes: Sequence[str] = DEFAULT_SCOPES,
        navigator: Optional[Navigator] = None,
        session: Optional[ClientSession] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize OAuth manager.

        Args:
            client_id: OAuth client identifier
            redirect_uri: Redirect URI registered for the client
            web_base_url: Authorization server base URL
            scopes: Requested scopes
            navigator: Application navigator for interactive flows
            session: Existing aiohttp session to use
            timeout: Request timeout in seconds
        """
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.web_base_url = web_base_url.rstrip("/")
        self.scopes = tuple(scopes)
        self.navigator = navigator
        self.timeout = ClientTimeout(total=timeout)

        self._session = session
        self._owns_session = session is None
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # Endpoints
    @property
    def authorization_endpoint(self) -> str:
        return f"{self.web_base_url}/oauth2/auth"

    @property
    def token_endpoint(self) -> str:
        return f"{self.web_base_url}/oauth2/token"

    @property
    def userinfo_endpoint(self) -> str:
        return f"{self.web_base_url}/userinfo"

    @property
    def end_session_endpoint(self) -> str:
        return f"{self.web_base_url}/oauth2/sessions/logout"

    def authorization_url(self, state: Optional[str] = None) -> str:
        """
        Build the authorization request URL.

        Args:
            state: Anti-forgery state (random when omitted)

        Returns:
            URL to show the user
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": " ".join(self.scopes),
            "state": state or secrets.token_urlsafe(16),
        }
        if self.redirect_uri:
            params["redirect_uri"] = self.redirect_uri
        return f"{self.authorization_endpoint}?{urlencode(params)}"

    # Interactive flows
    async def sign_in(self, method: SignInMethod) -> Optional[TokenSet]:
        """
        Start interactive sign-in.

        Args:
            method: Popup or redirect

        Returns:
            Tokens for popup sign-in; None for redirect, which completes
            through `redirect_callback` after navigation

        Raises:
            AuthenticationError: If no navigator is configured
        """
        navigator = self._require_navigator()
        url = self.authorization_url()

        if method == SignInMethod.POPUP:
            self._logger.info("Opening sign-in popup")
            return await navigator.open_popup(url)

        self._logger.info("Redirecting to sign-in page")
        await navigator.redirect(url)
        return None

    async def redirect_callback(self, callback_url: str) -> TokenSet:
        """Complete a redirect sign-in."""
        return await self._require_navigator().complete_redirect(callback_url)

    async def request_sign_out(self) -> None:
        """End the session at the authorization server."""
        if self.navigator is None:
            self._logger.debug("No navigator configured, skipping end-session visit")
            return
        await self.navigator.end_session(self.end_session_endpoint)

    # HTTP calls
    async def refresh_access_token(self, refresh_token: str) -> TokenSet:
        """
        Exchange a refresh token for new tokens.

        Raises:
            AuthenticationError: If the server rejects the refresh token
            AuthorizationServerError: If the server is unreachable or answers unusably
        """
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
        }
        data = await self._request_json("POST", self.token_endpoint, data=form)
        return TokenSet.from_response(data)

    async def request_user_info(self, access_token: BearerToken) -> UserInfoClaims:
        """Fetch the userinfo claims of the token's subject."""
        headers = {"Authorization": f"Bearer {access_token}"}
        return await self._request_json("GET", self.userinfo_endpoint, headers=headers)

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        session = await self._get_session()
        try:
            self._logger.debug(f"Request: {method} {url}")
            async with session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    text = await response.text()
                    # Only a 4xx answer is a rejection of the request itself
                    error_class = AuthorizationServerError if response.status >= 500 else AuthenticationError
                    raise error_class(
                        f"{method} {url} failed {response.status}: {text}",
                        code=response.status,
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise AuthorizationServerError(f"Malformed response from {url}") from e

        except asyncio.TimeoutError as e:
            raise AuthorizationServerError("Authorization server timed out") from e
        except aiohttp.ClientError as e:
            raise AuthorizationServerError(f"Authorization server unreachable: {e}") from e

        if not isinstance(payload, dict):
            raise AuthorizationServerError(f"Malformed response from {url}")
        return payload

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            )
            self._owns_session = True
        return self._session

    def _require_navigator(self) -> Navigator:
        if self.navigator is None:
            raise AuthenticationError("Interactive sign-in requires a navigator")
        return self.navigator

    async def close(self) -> None:
        """Close the HTTP session if this manager created it."""
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
