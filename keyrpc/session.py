"""Sign-in and sign-out orchestration."""

import asyncio
import inspect
import logging
from typing import Optional

from .auth.oauth import SignInMethod
from .auth.provider import AuthenticationStatus, AuthProvider
from .manager import ProviderEngineManager
from .types.common import SignOutHandler
from .types.user import User

__all__ = ["AuthSessionController"]

logger = logging.getLogger(__name__)


class AuthSessionController:
    """
    Ties the user's session to the cached provider engines.

    Session failures propagate to the caller and never touch the engines;
    only `sign_out` stops them.
    """

    def __init__(self, auth_provider: AuthProvider, engine_manager: ProviderEngineManager) -> None:
        self.auth_provider = auth_provider
        self.engine_manager = engine_manager
        self._sign_out_handlers: list[SignOutHandler] = []
        self._pending: set[asyncio.Task] = set()
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def sign_out_handlers(self) -> tuple[SignOutHandler, ...]:
        return tuple(self._sign_out_handlers)

    @property
    def auth_status(self) -> AuthenticationStatus:
        return self.auth_provider.auth_status

    async def get_auth_status(self) -> AuthenticationStatus:
        return self.auth_provider.auth_status

    async def start(self) -> Optional[User]:
        """Connect silently when possible, otherwise sign in with a popup."""
        return await self.auth_provider.sign_in_or_connect()

    async def sign_in(self) -> Optional[User]:
        """Sign in with a popup and return the user once it completes."""
        return await self.auth_provider.sign_in(SignInMethod.POPUP)

    def sign_in_redirect(self) -> None:
        """
        Start redirect sign-in without waiting for it.

        Must be called from a running event loop. The result is observed
        through `redirect_callback` on the page the user returns to.
        """
        task = asyncio.ensure_future(self.auth_provider.sign_in(SignInMethod.REDIRECT))
        self._pending.add(task)
        task.add_done_callback(self._redirect_done)

    def _redirect_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._logger.error(f"Redirect sign-in failed: {task.exception()}")

    async def redirect_callback(self, callback_url: str) -> User:
        """Complete a redirect sign-in."""
        return await self.auth_provider.redirect_callback(callback_url)

    async def connect(self) -> User:
        """Reconnect using the stored refresh token, without interaction."""
        return await self.auth_provider.connect()

    async def get_user(self) -> User:
        return await self.auth_provider.get_user()

    def add_sign_out_handler(self, handler: SignOutHandler) -> None:
        """Register a handler; registering it twice runs it twice."""
        self._sign_out_handlers.append(handler)

    def remove_sign_out_handler(self, handler: SignOutHandler) -> None:
        """Remove the first registration of a handler, if any."""
        for index, registered in enumerate(self._sign_out_handlers):
            if registered is handler:
                del self._sign_out_handlers[index]
                return

    async def sign_out(self) -> None:
        """
        Sign the user out.

        Ends the session, stops every cached engine, then runs each sign-out
        handler once in registration order.
        """
        await self.auth_provider.sign_out()
        self.engine_manager.stop_all()

        for handler in list(self._sign_out_handlers):
            result = handler()
            if inspect.isawaitable(result):
                await result
