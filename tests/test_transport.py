import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from keyrpc.exceptions import (
    RetryExhaustedError,
    TokenUnavailableError,
    TransientTransportError,
    UpstreamApplicationError,
)
from keyrpc.providers.http import AuthenticatedFetchSubprovider

from conftest import CLIENT_ID, make_call, rpc_error, rpc_result


@pytest.mark.asyncio
async def test_authenticated_method_sends_bearer_token(transport):
    transport.origin_header_key = "Origin"
    post = AsyncMock(return_value=(200, rpc_result("foo")))

    with patch.object(transport, "_post", post):
        result = await transport.send_request(make_call("eth_accounts", origin="http://foo.bar"))

    assert result == "foo"
    headers = post.call_args.args[1]
    assert headers["Authorization"] == "Bearer test-access-token"
    assert headers["X-API-KEY"] == CLIENT_ID
    assert headers["Origin"] == "http://foo.bar"


@pytest.mark.asyncio
async def test_token_failure_aborts_before_http(transport, token_provider):
    token_provider.logged_in = False
    post = AsyncMock(return_value=(200, rpc_result("foo")))

    with patch.object(transport, "_post", post):
        with pytest.raises(TokenUnavailableError, match="Not logged in"):
            await transport.send_request(make_call("eth_accounts"))

    post.assert_not_called()


@pytest.mark.asyncio
async def test_public_method_works_without_session(transport, token_provider):
    token_provider.logged_in = False
    post = AsyncMock(return_value=(200, rpc_result("foo")))

    with patch.object(transport, "_post", post):
        result = await transport.send_request(make_call("eth_peerCount"))

    assert result == "foo"
    headers = post.call_args.args[1]
    assert "Authorization" not in headers
    assert headers["X-API-KEY"] == CLIENT_ID
    assert token_provider.fetches == 0


@pytest.mark.asyncio
async def test_retries_server_errors_until_success(transport):
    post = AsyncMock(side_effect=[
        (500, "ECONNRESET"),
        (500, "ECONNRESET"),
        (200, rpc_result("foo")),
    ])

    with patch.object(transport, "_post", post):
        result = await transport.send_request(make_call("eth_peerCount"))

    assert result == "foo"
    assert post.call_count == 3


@pytest.mark.asyncio
async def test_retries_network_failures_without_refetching_token(transport, token_provider):
    post = AsyncMock(side_effect=[
        TransientTransportError("ECONNRESET"),
        TransientTransportError("ECONNRESET"),
        (200, rpc_result(["0xabc"])),
    ])

    with patch.object(transport, "_post", post):
        result = await transport.send_request(make_call("eth_accounts"))

    assert result == ["0xabc"]
    assert post.call_count == 3
    assert token_provider.fetches == 1
    for call in post.call_args_list:
        assert call.args[1]["Authorization"] == "Bearer test-access-token"


@pytest.mark.asyncio
async def test_retries_only_five_times(transport):
    post = AsyncMock(side_effect=TransientTransportError("ECONNRESET"))

    with patch.object(transport, "_post", post):
        with pytest.raises(RetryExhaustedError, match="All retries exhausted") as exc_info:
            await transport.send_request(make_call("eth_peerCount"))

    assert post.call_count == 5
    assert exc_info.value.attempts == 5
    assert isinstance(exc_info.value.__cause__, TransientTransportError)


@pytest.mark.asyncio
async def test_rate_limit_is_retried(transport):
    post = AsyncMock(side_effect=[(429, "slow down"), (200, rpc_result("0x1"))])

    with patch.object(transport, "_post", post):
        assert await transport.send_request(make_call("eth_blockNumber")) == "0x1"

    assert post.call_count == 2


@pytest.mark.asyncio
async def test_does_not_retry_application_errors(transport, token_provider):
    post = AsyncMock(return_value=(200, rpc_error("execution reverted", code=3)))

    with patch.object(transport, "_post", post):
        with pytest.raises(UpstreamApplicationError, match="execution reverted") as exc_info:
            await transport.send_request(make_call("eth_call"))

    await asyncio.sleep(0)
    assert post.call_count == 1
    assert exc_info.value.code == 3
    assert exc_info.value.is_authorization_error is False
    assert token_provider.invalidations == 0


@pytest.mark.asyncio
async def test_unauthorized_response_invalidates_token(transport, token_provider):
    post = AsyncMock(return_value=(200, json.dumps({"error": {"message": "Not Authorized"}})))

    with patch.object(transport, "_post", post):
        with pytest.raises(UpstreamApplicationError, match="Not Authorized") as exc_info:
            await transport.send_request(make_call("eth_peerCount"))

    await asyncio.sleep(0)
    assert post.call_count == 1
    assert exc_info.value.is_authorization_error is True
    assert token_provider.invalidations == 1


@pytest.mark.asyncio
async def test_http_401_invalidates_token(transport, token_provider):
    post = AsyncMock(return_value=(401, "Unauthorized"))

    with patch.object(transport, "_post", post):
        with pytest.raises(UpstreamApplicationError):
            await transport.send_request(make_call("eth_sendTransaction", [{}]))

    await asyncio.sleep(0)
    assert post.call_count == 1
    assert token_provider.invalidations == 1


@pytest.mark.asyncio
async def test_malformed_response_is_not_retried(transport):
    post = AsyncMock(return_value=(200, "<html>oops</html>"))

    with patch.object(transport, "_post", post):
        with pytest.raises(UpstreamApplicationError, match="Malformed"):
            await transport.send_request(make_call("eth_blockNumber"))

    assert post.call_count == 1


@pytest.mark.asyncio
async def test_null_result_is_returned(transport):
    post = AsyncMock(return_value=(200, rpc_result(None)))

    with patch.object(transport, "_post", post):
        assert await transport.send_request(make_call("eth_getTransactionReceipt", ["0x1"])) is None


@pytest.mark.asyncio
async def test_connection_refused_exhausts_retries(token_provider):
    transport = AuthenticatedFetchSubprovider(
        "http://127.0.0.1:1/web3",
        token_provider,
        retry_delay=0,
        timeout=5,
    )
    try:
        with pytest.raises(RetryExhaustedError):
            await transport.send_request(make_call("eth_blockNumber"))
    finally:
        await transport.close()


def test_additional_headers_win_ties(token_provider):
    transport = AuthenticatedFetchSubprovider(
        "https://localhost/web3",
        token_provider,
        headers={"X-API-KEY": CLIENT_ID},
        additional_headers={"X-API-KEY": "override", "X-FOO-FEATURE": "ENABLED"},
        origin_header_key="Origin",
    )
    headers = transport.build_headers(make_call("eth_accounts", origin="http://foo.bar"), "tok")

    assert headers["X-API-KEY"] == "override"
    assert headers["X-FOO-FEATURE"] == "ENABLED"
    assert headers["Authorization"] == "Bearer tok"
    assert headers["Origin"] == "http://foo.bar"
    assert headers["Content-Type"] == "application/json"


def test_origin_header_requires_configured_key(transport):
    headers = transport.build_headers(make_call("eth_peerCount", origin="http://foo.bar"))
    assert "Origin" not in headers


def test_authentication_policy(transport):
    assert transport.requires_authentication("eth_accounts")
    assert transport.requires_authentication("personal_sign")
    assert transport.requires_authentication("eth_sendTransaction")
    assert not transport.requires_authentication("eth_blockNumber")
    assert not transport.requires_authentication("eth_call")


def test_backoff_schedule(token_provider):
    transport = AuthenticatedFetchSubprovider("https://localhost/web3", token_provider)
    assert [transport.backoff_delay(n) for n in range(1, 5)] == [0.5, 1.0, 2.0, 4.0]
