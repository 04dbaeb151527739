from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from keyrpc import KeyRPC, ProviderOptions
from keyrpc.auth import AuthenticationStatus, SignInMethod
from keyrpc.connect_button import ButtonElement, ConnectButton
from keyrpc.exceptions import AuthenticationError
from keyrpc.types import User

from conftest import CLIENT_ID

USER = User(id="test-user", accounts=("0xabc",))


def test_default_provider_is_mainnet(sdk):
    provider = sdk.get_provider()

    assert provider.network.name == "mainnet"
    assert provider.network.chain_id == 1
    assert provider.network.rpc_url == "https://api.keyrpc.io/v1/web3/mainnet"
    assert provider.rpc_headers == {"X-API-KEY": CLIENT_ID}
    provider.stop()


def test_engines_are_reused(sdk):
    kovan = sdk.get_provider("kovan")
    assert sdk.get_provider(ProviderOptions(network_name="kovan")) is kovan
    assert len(sdk.engines) == 1


def test_instances_do_not_share_engines(sdk):
    other = KeyRPC(CLIENT_ID)
    assert sdk.get_provider("goerli") is not other.get_provider("goerli")


def test_api_base_url_is_used_for_networks():
    sdk = KeyRPC(CLIENT_ID, api_base_url="https://localhost:56610/v1")
    assert sdk.get_provider("sepolia").network.rpc_url == "https://localhost:56610/v1/web3/sepolia"


def test_repr(sdk):
    sdk.get_provider()
    assert repr(sdk) == "<KeyRPC client_id=test-client-id engines=1 status=not_connected>"


@pytest.mark.asyncio
async def test_get_auth_status(sdk):
    assert await sdk.get_auth_status() == AuthenticationStatus.NOT_CONNECTED


@pytest.mark.asyncio
async def test_context_manager_closes_resources():
    async with KeyRPC(CLIENT_ID) as sdk:
        engine = sdk.get_provider()
        assert engine.is_running
    assert not engine.is_running


def test_connect_button_wires_element(sdk):
    element = ButtonElement("Sign in")
    callback = MagicMock()

    button = sdk.get_connect_button(element, callback)

    assert isinstance(button, ConnectButton)
    assert element.onclick == button.sign_in
    assert button.callback is callback
    assert button.sign_in_method == SignInMethod.POPUP


def test_connect_button_default_element(sdk):
    button = sdk.get_connect_button()
    assert isinstance(button.element, ButtonElement)
    assert button.element.onclick == button.sign_in


@pytest.mark.asyncio
async def test_connect_button_click_signs_in(sdk):
    callback = MagicMock()
    button = sdk.get_connect_button(callback=callback)

    with patch.object(sdk, "sign_in", AsyncMock(return_value=USER)) as sign_in:
        assert await button.element.click() is USER

    sign_in.assert_awaited_once()
    callback.assert_called_once_with(None, USER)


@pytest.mark.asyncio
async def test_connect_button_reports_errors(sdk):
    callback = MagicMock()
    button = sdk.get_connect_button(callback=callback)
    error = AuthenticationError("popup closed")

    with patch.object(sdk, "sign_in", AsyncMock(side_effect=error)):
        assert await button.element.click() is None

    callback.assert_called_once_with(error, None)


@pytest.mark.asyncio
async def test_connect_button_without_callback_raises(sdk):
    button = sdk.get_connect_button()

    with patch.object(sdk, "sign_in", AsyncMock(side_effect=AuthenticationError("popup closed"))):
        with pytest.raises(AuthenticationError):
            await button.element.click()


@pytest.mark.asyncio
async def test_connect_button_redirect(sdk):
    callback = MagicMock()
    button = sdk.get_connect_button(callback=callback, sign_in_method=SignInMethod.REDIRECT)

    with patch.object(sdk, "sign_in_redirect") as sign_in_redirect:
        assert await button.element.click() is None

    sign_in_redirect.assert_called_once_with()
    callback.assert_not_called()
