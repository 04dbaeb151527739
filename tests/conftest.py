"""Shared fixtures for keyrpc tests."""

import json

import pytest

from keyrpc.client import KeyRPC
from keyrpc.exceptions import NotSignedInError
from keyrpc.providers.http import AuthenticatedFetchSubprovider

CLIENT_ID = "test-client-id"


class MockTokenProvider:
    """Token source that fails once signed out or invalidated."""

    def __init__(self) -> None:
        self.logged_in = True
        self.fetches = 0
        self.invalidations = 0

    async def get_access_token(self) -> str:
        self.fetches += 1
        if self.logged_in:
            return "test-access-token"
        raise NotSignedInError("Not logged in")

    async def invalidate_token(self) -> None:
        self.invalidations += 1
        self.logged_in = False


def make_call(method, params=None, **extra):
    return {"id": 0, "jsonrpc": "2.0", "method": method, "params": params or [], **extra}


def rpc_result(result):
    return json.dumps({"id": 0, "jsonrpc": "2.0", "result": result})


def rpc_error(message, code=None):
    error = {"message": message}
    if code is not None:
        error["code"] = code
    return json.dumps({"id": 0, "jsonrpc": "2.0", "error": error})


@pytest.fixture()
def token_provider():
    return MockTokenProvider()


@pytest.fixture()
def transport(token_provider):
    return AuthenticatedFetchSubprovider(
        "https://localhost:56610/v1/web3/kovan",
        token_provider,
        headers={"X-API-KEY": CLIENT_ID},
        retry_delay=0,
    )


@pytest.fixture()
def sdk():
    return KeyRPC(CLIENT_ID, "", retry_delay=0)
