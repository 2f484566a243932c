"""
Tests for SmartAccount user operation building and signing.
"""
import pytest
from eth_abi import decode, encode
from eth_utils import keccak

from earnwallet_sdk.exceptions import InvalidArgumentError
from earnwallet_sdk.models import TransactionIntent, UserOperationGas, WebAuthnOwner
from earnwallet_sdk.relay import SMART_WALLET_FACTORY_ADDRESS, SmartAccount, encode_owner, user_operation_hash
from earnwallet_sdk.relay.account import DUMMY_SIGNATURE, wrap_signature
from tests.test_helpers import (
    TEST_CHAIN_ID,
    TEST_OWNER_ADDRESS,
    TEST_RECIPIENT,
    TEST_WALLET_ADDRESS,
    counter,
    decode_call,
    make_fake_w3,
    selector,
)

ENTRY_POINT = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"


def make_account(signer, owners=None, code=b"", nonce=3, **kwargs):
    get_address = counter(TEST_WALLET_ADDRESS)
    w3 = make_fake_w3(
        {
            SMART_WALLET_FACTORY_ADDRESS: {"getAddress": get_address},
            ENTRY_POINT: {"getNonce": nonce},
        },
        code=code,
        base_fee=10,
        priority_fee=2,
    )
    account = SmartAccount(w3, owners or [signer.address], signer, TEST_CHAIN_ID, **kwargs)
    return account, w3, get_address


def test_dummy_signature_is_65_bytes():
    assert len(bytes.fromhex(DUMMY_SIGNATURE[2:])) == 65


def test_encode_owner_address_and_webauthn():
    encoded = encode_owner(TEST_OWNER_ADDRESS)
    assert len(encoded) == 32
    assert encoded[:12] == b"\x00" * 12
    assert encoded[12:].hex() == TEST_OWNER_ADDRESS[2:].lower()

    key = "0x" + "ab" * 64
    assert encode_owner(WebAuthnOwner(public_key=key)) == bytes.fromhex("ab" * 64)

    with pytest.raises(InvalidArgumentError):
        encode_owner(42)


def test_address_is_read_once_from_factory(signer):
    account, w3, get_address = make_account(signer)

    assert account.get_address() == TEST_WALLET_ADDRESS
    assert account.get_address() == TEST_WALLET_ADDRESS
    assert get_address.count == 1

    (_, _, (owners, salt)), = [call for call in w3.calls if call[1] == "getAddress"]
    assert owners == [encode_owner(signer.address)]
    assert salt == 0


def test_known_address_skips_factory(signer):
    account, _, get_address = make_account(signer, address=TEST_RECIPIENT.lower())
    assert account.get_address() == TEST_RECIPIENT
    assert get_address.count == 0


def test_owner_index_validation(signer):
    with pytest.raises(InvalidArgumentError):
        make_account(signer, owner_index=1)
    with pytest.raises(InvalidArgumentError):
        SmartAccount(make_fake_w3(), [], signer, TEST_CHAIN_ID)
    account, _, _ = make_account(signer, owner_index=2, address=TEST_WALLET_ADDRESS)
    assert account.owner_index == 2


def test_init_code_only_until_deployed(signer):
    account, _, _ = make_account(signer)
    init_code = account.get_init_code()
    assert init_code.startswith(SMART_WALLET_FACTORY_ADDRESS)
    assert init_code[42:50] == selector("createAccount(bytes[],uint256)")[2:]

    deployed, _, _ = make_account(signer, code=b"\x60\x80")
    assert deployed.get_init_code() == "0x"


def test_encode_single_call_uses_execute(signer):
    account, _, _ = make_account(signer)
    data = account.encode_calls([TransactionIntent(to=TEST_RECIPIENT, value=5, data="0x1234")])
    assert data.startswith(selector("execute(address,uint256,bytes)"))
    target, value, payload = decode_call(data, ["address", "uint256", "bytes"])
    assert target.lower() == TEST_RECIPIENT.lower()
    assert value == 5
    assert payload == b"\x12\x34"


def test_encode_several_calls_uses_execute_batch(signer):
    account, _, _ = make_account(signer)
    intents = [TransactionIntent(to=TEST_RECIPIENT, data="0x01"), TransactionIntent(to=TEST_OWNER_ADDRESS, value=1)]
    data = account.encode_calls(intents)
    assert data.startswith(selector("executeBatch((address,uint256,bytes)[])"))
    (calls,) = decode_call(data, ["(address,uint256,bytes)[]"])
    assert [call[1] for call in calls] == [0, 1]
    assert calls[0][2] == b"\x01"

    with pytest.raises(InvalidArgumentError):
        account.encode_calls([])


def test_build_user_operation_for_estimation(signer):
    account, _, _ = make_account(signer)
    user_op = account.build_user_operation([TransactionIntent(to=TEST_RECIPIENT, value=1)])

    assert user_op["sender"] == TEST_WALLET_ADDRESS
    assert user_op["nonce"] == 3
    assert user_op["callGasLimit"] == 0
    assert user_op["maxFeePerGas"] == 22
    assert user_op["maxPriorityFeePerGas"] == 2
    assert user_op["paymasterAndData"] == "0x"
    index, stub = decode(["(uint8,bytes)"], bytes.fromhex(user_op["signature"][2:]))[0]
    assert index == 0
    assert stub == bytes.fromhex(DUMMY_SIGNATURE[2:])


def test_build_user_operation_with_gas(signer):
    account, _, _ = make_account(signer)
    gas = UserOperationGas(call_gas_limit=1, verification_gas_limit=2, pre_verification_gas=3)
    user_op = account.build_user_operation([TransactionIntent(to=TEST_RECIPIENT)], gas=gas)
    assert (user_op["callGasLimit"], user_op["verificationGasLimit"], user_op["preVerificationGas"]) == (1, 2, 3)


def test_user_operation_hash_matches_entry_point_layout():
    user_op = {
        "sender": TEST_WALLET_ADDRESS,
        "nonce": 1,
        "initCode": "0x",
        "callData": "0xabcd",
        "callGasLimit": 10,
        "verificationGasLimit": 20,
        "preVerificationGas": 30,
        "maxFeePerGas": 40,
        "maxPriorityFeePerGas": 50,
        "paymasterAndData": "0x",
    }
    inner = keccak(encode(
        ["address", "uint256", "bytes32", "bytes32", "uint256", "uint256", "uint256", "uint256", "uint256", "bytes32"],
        [TEST_WALLET_ADDRESS, 1, keccak(b""), keccak(b"\xab\xcd"), 10, 20, 30, 40, 50, keccak(b"")],
    ))
    expected = keccak(encode(["bytes32", "address", "uint256"], [inner, ENTRY_POINT, TEST_CHAIN_ID]))

    assert user_operation_hash(user_op, ENTRY_POINT, TEST_CHAIN_ID) == expected
    assert user_operation_hash(user_op, ENTRY_POINT, 1) != expected


def test_sign_user_operation_wraps_owner_signature(signer):
    account, _, _ = make_account(signer, owners=[TEST_OWNER_ADDRESS, signer.address], owner_index=1)
    user_op = account.build_user_operation([TransactionIntent(to=TEST_RECIPIENT)])

    signature = account.sign_user_operation(user_op)

    op_hash = user_operation_hash(user_op, account.entry_point, TEST_CHAIN_ID)
    assert signature == "0x" + wrap_signature(1, signer.sign_hash(op_hash)).hex()
