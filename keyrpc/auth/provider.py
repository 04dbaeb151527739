"""Session state and access token source."""

import logging
from enum import Enum
from typing import Optional

from ..auth.oauth import OAuthManager, SignInMethod
from ..auth.tokens import AccessToken, TokenSet, TokenStore
from ..exceptions import AuthenticationError, AuthorizationServerError, NotSignedInError
from ..types.common import BearerToken
from ..types.user import User

__all__ = ["AuthenticationStatus", "AuthProvider"]

logger = logging.getLogger(__name__)


class AuthenticationStatus(str, Enum):
    """Session states reported to the application."""

    NOT_CONNECTED = "not_connected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class AuthProvider:
    """
    Holds the user's session and hands out access tokens.

    Implements the access token provider used by the transports. The
    refresh token is persisted through the token store; access tokens and
    the user profile live in memory only.
    """

    def __init__(self, oauth_manager: OAuthManager, token_store: TokenStore) -> None:
        """
        Initialize auth provider.

        Args:
            oauth_manager: Authorization server client
            token_store: Refresh token persistence
        """
        self.oauth_manager = oauth_manager
        self.token_store = token_store

        self._access_token: Optional[AccessToken] = None
        self._user: Optional[User] = None
        self._status = AuthenticationStatus.NOT_CONNECTED
        # Silent refresh is allowed only while a session is active
        self._session_active = False
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def auth_status(self) -> AuthenticationStatus:
        return self._status

    @property
    def user(self) -> Optional[User]:
        """Last loaded user, if any."""
        return self._user

    async def sign_in_or_connect(self) -> Optional[User]:
        """Connect with a stored refresh token, or sign in with a popup."""
        if self.token_store.get_refresh_token():
            return await self.connect()
        return await self.sign_in(SignInMethod.POPUP)

    async def sign_in(self, method: SignInMethod) -> Optional[User]:
        """
        Sign in interactively.

        Args:
            method: Popup or redirect

        Returns:
            The user for popup sign-in, None for redirect
        """
        self._status = AuthenticationStatus.CONNECTING
        try:
            tokens = await self.oauth_manager.sign_in(method)
        except Exception:
            self._reset_status()
            raise

        if tokens is None:
            # Navigation in progress; completes in redirect_callback
            return None
        return await self._complete_sign_in(tokens)

    async def redirect_callback(self, callback_url: str) -> User:
        """Finish a redirect sign-in and load the user."""
        self._status = AuthenticationStatus.CONNECTING
        try:
            tokens = await self.oauth_manager.redirect_callback(callback_url)
        except Exception:
            self._reset_status()
            raise
        return await self._complete_sign_in(tokens)

    async def connect(self) -> User:
        """
        Reconnect silently using the stored refresh token.

        Raises:
            NotSignedInError: If no refresh token is stored
            AuthenticationError: If the refresh token is rejected
        """
        await self.refresh_access_token()
        return await self.load_user()

    async def refresh_access_token(self) -> AccessToken:
        """
        Get a new access token from the stored refresh token.

        Raises:
            NotSignedInError: If no refresh token is stored
            AuthorizationServerError: If the server could not be reached; the session is kept
            AuthenticationError: If the refresh token is rejected; the session ends
        """
        refresh_token = self.token_store.get_refresh_token()
        if not refresh_token:
            raise NotSignedInError("No stored refresh token")

        if self._status != AuthenticationStatus.CONNECTED:
            self._status = AuthenticationStatus.CONNECTING
        try:
            tokens = await self.oauth_manager.refresh_access_token(refresh_token)
        except AuthorizationServerError as e:
            # Session stays active; the next token request tries again
            self._logger.warning(f"Token refresh failed: {e}")
            self._reset_status()
            raise
        except AuthenticationError:
            self._access_token = None
            self._session_active = False
            self._status = AuthenticationStatus.NOT_CONNECTED
            raise

        self._accept_tokens(tokens)
        return tokens.access_token

    async def load_user(self) -> User:
        """Fetch the user profile with the current access token."""
        access_token = await self.get_access_token()
        claims = await self.oauth_manager.request_user_info(access_token)
        self._user = User.from_claims(claims)
        return self._user

    async def get_user(self) -> User:
        """Return the cached user, loading it if needed."""
        if self._user is not None:
            return self._user
        return await self.load_user()

    async def sign_out(self) -> None:
        """End the session. The stored refresh token is left in place."""
        try:
            await self.oauth_manager.request_sign_out()
        finally:
            self._access_token = None
            self._user = None
            self._session_active = False
            self._status = AuthenticationStatus.NOT_CONNECTED
            self._logger.info("Signed out")

    # Access token provider
    async def get_access_token(self) -> BearerToken:
        """
        Return a usable access token, refreshing when it has expired.

        Raises:
            NotSignedInError: If there is no active session
        """
        if self._access_token is not None and not self._access_token.is_expired:
            return self._access_token.token

        if self._session_active and self.token_store.get_refresh_token():
            return (await self.refresh_access_token()).token

        raise NotSignedInError()

    async def invalidate_token(self) -> None:
        """Drop the cached access token."""
        self._access_token = None

    def _accept_tokens(self, tokens: TokenSet) -> None:
        self._access_token = tokens.access_token
        if tokens.refresh_token:
            self.token_store.set_refresh_token(tokens.refresh_token)
        self._session_active = True
        self._status = AuthenticationStatus.CONNECTED

    async def _complete_sign_in(self, tokens: TokenSet) -> User:
        self._accept_tokens(tokens)
        user = await self.load_user()
        self._logger.info(f"Signed in as {user.id}")
        return user

    def _reset_status(self) -> None:
        if self._session_active:
            self._status = AuthenticationStatus.CONNECTED
        else:
            self._status = AuthenticationStatus.NOT_CONNECTED
