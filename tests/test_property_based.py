"""
Property-based tests using Hypothesis.
"""
from decimal import Decimal
from unittest.mock import MagicMock

from hypothesis import given, settings, strategies as st

from earnwallet_sdk.models import TransactionIntent, UserOperationGas, UserOperationReceipt, VaultDescriptor
from earnwallet_sdk.protocols.base import select_best
from earnwallet_sdk.relay.account import SMART_WALLET_FACTORY_ADDRESS
from earnwallet_sdk.signer import LocalSigner
from earnwallet_sdk.utils import format_units, parse_units
from earnwallet_sdk.wallet import SmartWallet
from tests.test_helpers import (
    BASE_USDC,
    TEST_CHAIN_ID,
    TEST_PRIV_KEY,
    TEST_RECIPIENT,
    TEST_WALLET_ADDRESS,
    make_fake_w3,
)

SIGNER = LocalSigner(TEST_PRIV_KEY)
gas_values = st.integers(min_value=0, max_value=10 ** 12)


def vault(index, apy):
    return VaultDescriptor(
        id=f"vault-{index}",
        chain="base",
        deposit_token_address=BASE_USDC,
        deposit_token_decimals=6,
        vault_address="0x" + f"{index + 1:040x}",
        apy=apy,
    )


@settings(max_examples=50)
@given(order=st.permutations([0.05, 0.08, 0.03]))
def test_best_vault_is_highest_apy_in_any_order(order):
    vaults = [vault(i, apy) for i, apy in enumerate(order)]
    assert select_best(vaults).apy == 0.08


@settings(max_examples=50)
@given(apys=st.lists(st.one_of(st.none(), st.floats(min_value=0, max_value=10)), min_size=1, max_size=8))
def test_best_vault_never_loses_to_another(apys):
    vaults = [vault(i, apy) for i, apy in enumerate(apys)]
    best = select_best(vaults)
    assert all((best.apy or 0) >= (other.apy or 0) for other in vaults)
    ties = [v for v in vaults if (v.apy or 0) == (best.apy or 0)]
    assert best.id == ties[0].id


@settings(max_examples=50)
@given(call=gas_values, verification=gas_values, pre_verification=gas_values)
def test_submitted_gas_is_floor_of_one_point_four(call, verification, pre_verification):
    relay = MagicMock()
    relay.estimate_user_operation_gas.return_value = UserOperationGas(
        call_gas_limit=call, verification_gas_limit=verification, pre_verification_gas=pre_verification,
    )
    relay.send_user_operation.return_value = "0xophash"
    relay.wait_for_user_operation_receipt.return_value = UserOperationReceipt(user_op_hash="0xophash", success=True)
    registry = MagicMock()
    registry.get_supported_chain.return_value = TEST_CHAIN_ID
    registry.get_query_client.return_value = make_fake_w3(
        {SMART_WALLET_FACTORY_ADDRESS: {"getAddress": TEST_WALLET_ADDRESS}}
    )
    registry.get_relay_client.return_value = relay
    wallet = SmartWallet([SIGNER.address], SIGNER, registry)

    wallet.send(TransactionIntent(to=TEST_RECIPIENT), TEST_CHAIN_ID)

    submitted = relay.send_user_operation.call_args[0][1]
    assert submitted.call_gas_limit == call * 14 // 10
    assert submitted.verification_gas_limit == verification * 14 // 10
    assert submitted.pre_verification_gas == pre_verification * 14 // 10


@settings(max_examples=50)
@given(raw=st.integers(min_value=0, max_value=10 ** 30), decimals=st.integers(min_value=0, max_value=18))
def test_format_then_parse_is_identity(raw, decimals):
    assert parse_units(format_units(raw, decimals), decimals) == raw


@settings(max_examples=50)
@given(amount=st.decimals(min_value=0, max_value=10 ** 9, places=6, allow_nan=False, allow_infinity=False))
def test_parse_units_matches_decimal_scaling(amount):
    assert parse_units(str(amount), 6) == int(amount * Decimal(10 ** 6))
