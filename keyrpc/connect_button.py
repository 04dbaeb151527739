"""Connect button wiring."""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from .auth.oauth import SignInMethod
from .types.user import User

if TYPE_CHECKING:
    from .client import KeyRPC

__all__ = ["ButtonElement", "ConnectButton"]

logger = logging.getLogger(__name__)

ConnectCallback = Callable[[Optional[BaseException], Optional[User]], Any]


class ButtonElement:
    """Minimal stand-in for a UI button: a label and an `onclick` slot."""

    def __init__(self, text: str = "Connect") -> None:
        self.text = text
        self.onclick: Optional[Callable[[], Any]] = None

    async def click(self) -> Any:
        if self.onclick is None:
            return None
        return await self.onclick()


class ConnectButton:
    """
    Signs the user in when its element is clicked.

    Popup sign-in reports through `callback(error, user)`; redirect sign-in
    navigates away and reports through `redirect_callback` later.
    """

    def __init__(
        self,
        sdk: "KeyRPC",
        element: Optional[Any] = None,
        callback: Optional[ConnectCallback] = None,
        sign_in_method: SignInMethod = SignInMethod.POPUP,
    ) -> None:
        self.sdk = sdk
        self.element = element if element is not None else ButtonElement()
        self.callback = callback
        self.sign_in_method = sign_in_method
        self.element.onclick = self.sign_in

    async def sign_in(self) -> Optional[User]:
        if self.sign_in_method == SignInMethod.REDIRECT:
            self.sdk.sign_in_redirect()
            return None

        try:
            user = await self.sdk.sign_in()
        except Exception as e:
            logger.debug(f"Connect button sign-in failed: {e}")
            if self.callback is None:
                raise
            self.callback(e, None)
            return None

        if self.callback is not None:
            self.callback(None, user)
        return user
