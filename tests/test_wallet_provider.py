"""
Tests for SmartWalletProvider and WalletProvider.
"""
from unittest.mock import MagicMock

import pytest

from earnwallet_sdk.exceptions import InvalidArgumentError, WalletNotFoundError
from earnwallet_sdk.relay.account import SMART_WALLET_FACTORY_ADDRESS
from earnwallet_sdk.signer import LocalSigner
from earnwallet_sdk.wallet import EmbeddedWallet, SmartWalletProvider, WalletProvider
from tests.test_helpers import (
    TEST_CHAIN_ID,
    TEST_OWNER_ADDRESS,
    TEST_PRIV_KEY,
    TEST_RECIPIENT,
    TEST_WALLET_ADDRESS,
    counter,
    make_fake_w3,
)


class InMemoryEmbeddedWalletProvider:
    def __init__(self):
        self.wallets = {}

    def create_wallet(self):
        signer = LocalSigner(TEST_PRIV_KEY)
        wallet = EmbeddedWallet(wallet_id=f"wallet-{len(self.wallets) + 1}", address=signer.address, _signer=signer)
        self.wallets[wallet.wallet_id] = wallet
        return wallet

    def get_wallet(self, wallet_id):
        return self.wallets.get(wallet_id)


@pytest.fixture
def get_address():
    return counter(TEST_WALLET_ADDRESS)


@pytest.fixture
def smart_provider(get_address):
    registry = MagicMock()
    registry.get_supported_chain.return_value = TEST_CHAIN_ID
    registry.get_query_client.return_value = make_fake_w3({SMART_WALLET_FACTORY_ADDRESS: {"getAddress": get_address}})
    return SmartWalletProvider(registry, protocol=MagicMock(), ramp=MagicMock())


@pytest.fixture
def provider(smart_provider):
    return WalletProvider(InMemoryEmbeddedWalletProvider(), smart_provider)


def test_create_wallet_binds_protocol_and_ramp(smart_provider, signer):
    wallet = smart_provider.create_wallet([signer.address], signer, salt=7)
    assert wallet.protocol is smart_provider.protocol
    assert wallet.ramp is smart_provider.ramp
    assert wallet.salt == 7


def test_get_wallet_address_is_counterfactual(smart_provider, signer):
    assert smart_provider.get_wallet_address([signer.address]) == TEST_WALLET_ADDRESS


def test_get_wallet_with_known_address(smart_provider, signer, get_address):
    wallet = smart_provider.get_wallet(TEST_RECIPIENT, signer)
    assert wallet.get_address() == TEST_RECIPIENT
    assert wallet.owners == [signer.address]
    assert get_address.count == 0


def test_create_account_appends_embedded_owner(provider):
    result = provider.create_account(owners=[TEST_OWNER_ADDRESS])

    embedded = provider.get_embedded_wallet(result.embedded_wallet_id)
    wallet = result.smart_wallet
    assert wallet.owners == [TEST_OWNER_ADDRESS, embedded.address]
    assert wallet.signer_owner_index == 1
    assert wallet.signer is embedded.account()


def test_create_account_inserts_at_index(provider):
    owners = [TEST_OWNER_ADDRESS, TEST_RECIPIENT]
    result = provider.create_account(owners=owners, embedded_wallet_index=0)

    assert result.smart_wallet.owners[0] == provider.get_embedded_wallet(result.embedded_wallet_id).address
    assert result.smart_wallet.signer_owner_index == 0
    assert owners == [TEST_OWNER_ADDRESS, TEST_RECIPIENT]


def test_create_account_inserts_in_middle(provider):
    result = provider.create_account(owners=[TEST_OWNER_ADDRESS, TEST_RECIPIENT], embedded_wallet_index=1)

    embedded = provider.get_embedded_wallet(result.embedded_wallet_id)
    wallet = result.smart_wallet
    assert wallet.owners == [TEST_OWNER_ADDRESS, embedded.address, TEST_RECIPIENT]
    assert wallet.signer_owner_index == 1
    assert wallet.get_smart_account(TEST_CHAIN_ID).owner_index == 1


@pytest.mark.parametrize("index", [-1, 2, 5])
def test_create_account_rejects_out_of_range_index(provider, index):
    with pytest.raises(InvalidArgumentError, match="out of range"):
        provider.create_account(owners=[TEST_OWNER_ADDRESS], embedded_wallet_index=index)
    assert provider.embedded_wallet_provider.wallets == {}


def test_create_account_without_owners(provider):
    result = provider.create_account()
    assert len(result.smart_wallet.owners) == 1
    assert result.smart_wallet.get_address() == TEST_WALLET_ADDRESS


def test_get_account_defaults_to_embedded_owner(provider, get_address):
    created = provider.create_account()

    wallet = provider.get_account(created.embedded_wallet_id)

    assert wallet.get_address() == TEST_WALLET_ADDRESS
    assert wallet.owners == created.smart_wallet.owners


def test_get_account_unknown_wallet(provider):
    with pytest.raises(WalletNotFoundError):
        provider.get_account("missing")


def test_get_smart_wallet_needs_address_or_owners(provider, signer):
    with pytest.raises(InvalidArgumentError):
        provider.get_smart_wallet(signer)


def test_get_smart_wallet_by_address(provider, signer, get_address):
    wallet = provider.get_smart_wallet(signer, wallet_address=TEST_RECIPIENT, signer_owner_index=2)
    assert wallet.get_address() == TEST_RECIPIENT
    assert wallet.signer_owner_index == 2
    assert get_address.count == 0


def test_get_smart_wallet_by_owners(provider, signer):
    wallet = provider.get_smart_wallet(signer, deployment_owners=[signer.address])
    assert wallet.get_address() == TEST_WALLET_ADDRESS
