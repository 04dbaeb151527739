import pytest

from keyrpc.constants import Network
from keyrpc.exceptions import UnsupportedNetworkError, ValidationError
from keyrpc.networks import NetworkRegistry, canonical_key
from keyrpc.types import NetworkConfig


def test_default_is_mainnet():
    registry = NetworkRegistry()
    config = registry.resolve()
    assert config.name == Network.MAINNET.value
    assert config.chain_id == 1
    assert config.rpc_url == "https://api.keyrpc.io/v1/web3/mainnet"


def test_resolve_known_names():
    registry = NetworkRegistry("http://localhost:8080/v1/")
    assert registry.resolve("kovan").chain_id == 42
    assert registry.resolve("rinkeby").rpc_url == "http://localhost:8080/v1/web3/rinkeby"
    assert "sepolia" in registry


@pytest.mark.parametrize("name", ["ropstem", "Kovan", "MAINNET", ""])
def test_unknown_names_are_rejected(name):
    with pytest.raises(UnsupportedNetworkError, match="Unsupported network") as exc_info:
        NetworkRegistry().resolve(name)
    assert exc_info.value.looks_like_url is False


@pytest.mark.parametrize("name", ["http://localhost:7545", "https://mainnet.infura.io/v3/abc"])
def test_url_shaped_names_get_distinct_message(name):
    with pytest.raises(UnsupportedNetworkError, match="Unsupported network name") as exc_info:
        NetworkRegistry().resolve(name)
    assert exc_info.value.looks_like_url is True
    assert "network=NetworkConfig" in str(exc_info.value)


def test_canonical_keys():
    registry = NetworkRegistry()
    a = NetworkConfig(rpc_url="http://localhost:3000/web3", chain_id=0)
    b = NetworkConfig(rpc_url="http://localhost:3000/web3/", chain_id=0)
    c = NetworkConfig(rpc_url="http://localhost:3000/web3", chain_id=1)

    assert canonical_key(registry.resolve("kovan")) == ("network", "kovan")
    assert canonical_key(a) == canonical_key(b)
    assert canonical_key(a) != canonical_key(c)
    assert a.is_custom and not registry.resolve().is_custom

    named = NetworkConfig(rpc_url="https://third-party.example/rpc", chain_id=1, name="mainnet")
    assert named.is_custom
    assert canonical_key(named) == ("custom", "https://third-party.example/rpc", 1)
    assert NetworkConfig.from_dict({"rpc_url": "http://localhost:8545", "chain_id": 1, "name": "kovan"}).is_custom


def test_network_config_validation():
    with pytest.raises(ValidationError):
        NetworkConfig(rpc_url="not a url", chain_id=1)
    with pytest.raises(ValidationError):
        NetworkConfig(rpc_url="http://localhost:8545", chain_id=-1)
    config = NetworkConfig.from_dict({"rpc_url": "http://localhost:8545", "chain_id": 1337})
    assert config.chain_id == 1337
