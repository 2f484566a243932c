"""
Pytest fixtures for the EarnWallet SDK tests.
"""
import time

import pytest
from web3.providers.rpc import HTTPProvider

from earnwallet_sdk._rate_limited_log import reset_rate_limited_log
from earnwallet_sdk.keystore import KeyStore, crypto
from earnwallet_sdk.network import NetworkRegistry
from earnwallet_sdk.signer import LocalSigner

from tests.test_helpers import TEST_CHAIN_ID, TEST_PRIV_KEY, TEST_RELAY_URL, TEST_RPC_URL, make_fake_w3


# Make time.sleep instantaneous so receipt polling doesn't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    Works for all tests because it is autouse.
    """
    def _dummy(self, method, params=None, *args, **kwargs):
        if method == "eth_chainId":
            return {"jsonrpc": "2.0", "id": 1, "result": hex(TEST_CHAIN_ID)}
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _reset_log_suppression():
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


@pytest.fixture(autouse=True)
def _fixed_master_key(monkeypatch):
    """Keep the OS keyring out of tests"""
    monkeypatch.setattr(crypto, "_encryption_key_cache", b"k" * 32)


@pytest.fixture
def registry():
    return NetworkRegistry.from_urls(TEST_CHAIN_ID, TEST_RPC_URL, TEST_RELAY_URL)


@pytest.fixture
def fake_w3():
    return make_fake_w3()


@pytest.fixture
def registry_with_w3(registry, monkeypatch):
    """Registry whose query client is a fake; set .w3 contracts per test"""
    def attach(w3):
        monkeypatch.setattr(registry, "get_query_client", lambda chain_id: w3)
        return registry
    return attach


@pytest.fixture
def signer():
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def key_store(tmp_path):
    return KeyStore(str(tmp_path / "store.json"))
