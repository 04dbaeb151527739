"""Constants and policy tables for keyrpc."""

import re
from enum import Enum

__all__ = [
    "Network",
    "CHAIN_IDS",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_WEB_BASE_URL",
    "DEFAULT_STORAGE_NAMESPACE",
    "DEFAULT_SCOPES",
    "DEFAULT_TIMEOUT",
    "DEFAULT_POLLING_INTERVAL",
    "MAX_ATTEMPTS",
    "RETRY_DELAY",
    "CLIENT_ID_HEADER",
    "USER_AGENT",
    "AUTHENTICATED_METHODS",
    "AUTHORIZATION_ERROR_PATTERN",
    "FIXTURE_RESULTS",
]


class Network(str, Enum):
    """Networks served by the hosted JSON-RPC gateway."""

    MAINNET = "mainnet"
    RINKEBY = "rinkeby"
    GOERLI = "goerli"
    KOVAN = "kovan"
    SEPOLIA = "sepolia"


CHAIN_IDS = {
    Network.MAINNET: 1,
    Network.RINKEBY: 4,
    Network.GOERLI: 5,
    Network.KOVAN: 42,
    Network.SEPOLIA: 11155111,
}

# Endpoints
DEFAULT_API_BASE_URL = "https://api.keyrpc.io/v1"
DEFAULT_WEB_BASE_URL = "https://account.keyrpc.io"

# Session
DEFAULT_STORAGE_NAMESPACE = "keyrpc"
DEFAULT_SCOPES = ("openid", "offline")

# Request settings
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_POLLING_INTERVAL = 4.0  # seconds between eth_blockNumber polls
MAX_ATTEMPTS = 5  # total HTTP attempts per call, first one included
RETRY_DELAY = 0.5  # seconds; doubles after every failed attempt

CLIENT_ID_HEADER = "X-API-KEY"
USER_AGENT = "keyrpc-python/1.0.0"

# Methods that reveal accounts or sign. Only these carry a bearer token.
AUTHENTICATED_METHODS = frozenset({
    "eth_accounts",
    "eth_requestAccounts",
    "eth_coinbase",
    "eth_sendTransaction",
    "eth_signTransaction",
    "eth_sign",
    "personal_sign",
    "eth_signTypedData",
    "eth_signTypedData_v3",
    "eth_signTypedData_v4",
})

AUTHORIZATION_ERROR_PATTERN = re.compile(
    r"not authori[sz]ed|unauthori[sz]ed|not signed in|invalid token|access token",
    re.IGNORECASE,
)

# Answered locally by the fixture stage, never sent upstream
FIXTURE_RESULTS = {
    "web3_clientVersion": USER_AGENT,
    "net_listening": True,
    "eth_hashrate": "0x00",
    "eth_mining": False,
}
