"""Main keyrpc client."""

import logging
from typing import Any, Callable, Optional

from .auth.oauth import Navigator, OAuthManager, SignInMethod
from .auth.provider import AuthenticationStatus, AuthProvider
from .auth.tokens import Storage, TokenStore
from .config import Settings
from .connect_button import ConnectButton
from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_STORAGE_NAMESPACE,
    DEFAULT_WEB_BASE_URL,
    MAX_ATTEMPTS,
    RETRY_DELAY,
)
from .engine import ProviderEngine
from .manager import ProviderEngineManager
from .networks import NetworkRegistry
from .session import AuthSessionController
from .types.common import ClientId, SignOutHandler
from .types.network import ProviderIdentifier
from .types.user import User

__all__ = ["KeyRPC"]

logger = logging.getLogger(__name__)


class KeyRPC:
    """
    Entry point of the SDK.

    Owns the user's session and one engine cache; several instances never
    share engines.
    """

    def __init__(
        self,
        client_id: str,
        redirect_uri: Optional[str] = None,
        *,
        web_base_url: str = DEFAULT_WEB_BASE_URL,
        api_base_url: str = DEFAULT_API_BASE_URL,
        storage: Optional[Storage] = None,
        storage_namespace: str = DEFAULT_STORAGE_NAMESPACE,
        navigator: Optional[Navigator] = None,
        oauth_manager: Optional[OAuthManager] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        origin_header_key: Optional[str] = None,
    ) -> None:
        """
        Initialize keyrpc client.

        Args:
            client_id: OAuth client identifier
            redirect_uri: Redirect URI registered for the client
            web_base_url: Authorization server base URL
            api_base_url: JSON-RPC gateway base URL
            storage: Refresh token storage (default: in memory)
            storage_namespace: Prefix of the refresh token key
            navigator: Application navigator for popup/redirect sign-in
            oauth_manager: Preconfigured OAuth manager (overrides the above)
            max_attempts: Transport attempt ceiling
            retry_delay: Transport base backoff delay in seconds
            origin_header_key: Header carrying a call's origin, if any
        """
        self.client_id = ClientId(client_id)
        self.oauth_manager = oauth_manager or OAuthManager(
            client_id=self.client_id,
            redirect_uri=redirect_uri,
            web_base_url=web_base_url,
            navigator=navigator,
        )
        self.auth_provider = AuthProvider(
            self.oauth_manager,
            TokenStore(self.client_id, storage, namespace=storage_namespace),
        )
        self.engines = ProviderEngineManager(
            client_id=self.client_id,
            token_provider=self.auth_provider,
            registry=NetworkRegistry(api_base_url),
            web_base_url=web_base_url,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            origin_header_key=origin_header_key,
        )
        self.session = AuthSessionController(self.auth_provider, self.engines)

        logger.info(f"Initialized keyrpc client {self.client_id}")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "KeyRPC":
        """
        Create a client from loaded settings.

        Args:
            settings: Result of `load_settings()`
            **kwargs: Additional constructor arguments

        Returns:
            Configured client
        """
        return cls(
            settings.client_id,
            settings.redirect_uri,
            web_base_url=settings.web_base_url,
            api_base_url=settings.api_base_url,
            storage_namespace=settings.storage_namespace,
            **kwargs,
        )

    # Providers
    def get_provider(self, identifier: ProviderIdentifier = None) -> ProviderEngine:
        """
        Get the provider engine for a network.

        Args:
            identifier: Network name, ProviderOptions, option mapping, or None for mainnet

        Returns:
            Cached engine for the network

        Raises:
            UnsupportedNetworkError: If a network name is unknown
        """
        return self.engines.get_provider(identifier)

    # Session
    @property
    def auth_status(self) -> AuthenticationStatus:
        return self.session.auth_status

    async def get_auth_status(self) -> AuthenticationStatus:
        return await self.session.get_auth_status()

    async def start(self) -> Optional[User]:
        return await self.session.start()

    async def sign_in(self) -> Optional[User]:
        return await self.session.sign_in()

    def sign_in_redirect(self) -> None:
        self.session.sign_in_redirect()

    async def redirect_callback(self, callback_url: str) -> User:
        return await self.session.redirect_callback(callback_url)

    async def connect(self) -> User:
        return await self.session.connect()

    async def get_user(self) -> User:
        return await self.session.get_user()

    def add_sign_out_handler(self, handler: SignOutHandler) -> None:
        self.session.add_sign_out_handler(handler)

    def remove_sign_out_handler(self, handler: SignOutHandler) -> None:
        self.session.remove_sign_out_handler(handler)

    async def sign_out(self) -> None:
        await self.session.sign_out()

    def get_connect_button(
        self,
        element: Optional[Any] = None,
        callback: Optional[Callable[..., Any]] = None,
        sign_in_method: SignInMethod = SignInMethod.POPUP,
    ) -> ConnectButton:
        """
        Create a button that signs the user in when clicked.

        Args:
            element: Object receiving the `onclick` handler (default: ButtonElement)
            callback: Called as `callback(error, user)` after popup sign-in
            sign_in_method: Popup or redirect

        Returns:
            Connect button
        """
        return ConnectButton(self, element, callback, sign_in_method)

    # Resources
    async def aclose(self) -> None:
        """Stop all engines and close HTTP sessions."""
        await self.engines.close_all()
        await self.oauth_manager.close()

    async def __aenter__(self) -> "KeyRPC":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"<KeyRPC client_id={self.client_id} "
            f"engines={len(self.engines)} "
            f"status={self.auth_status.value}>"
        )
