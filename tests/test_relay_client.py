"""
Tests for the bundler JSON-RPC client.
"""
import pytest
import requests

from earnwallet_sdk.exceptions import RelayError, RelayTimeoutError
from earnwallet_sdk.models import TransactionIntent, UserOperationGas
from earnwallet_sdk.relay import RelayClient, SmartAccount
from earnwallet_sdk.relay.account import ENTRY_POINT_ADDRESS, SMART_WALLET_FACTORY_ADDRESS
from tests.test_helpers import TEST_CHAIN_ID, TEST_RECIPIENT, TEST_RELAY_URL, TEST_WALLET_ADDRESS, make_fake_w3

INTENTS = [TransactionIntent(to=TEST_RECIPIENT, value=1)]


@pytest.fixture
def account(signer):
    w3 = make_fake_w3({
        SMART_WALLET_FACTORY_ADDRESS: {"getAddress": TEST_WALLET_ADDRESS},
        ENTRY_POINT_ADDRESS: {"getNonce": 0},
    })
    return SmartAccount(w3, [signer.address], signer, TEST_CHAIN_ID)


@pytest.fixture
def relay(account):
    return RelayClient(TEST_RELAY_URL, account, receipt_timeout=5, poll_interval=0)


def rpc_result(result):
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def test_estimate_parses_gas(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, json=rpc_result({
        "callGasLimit": "0x100",
        "verificationGasLimit": "0x200",
        "preVerificationGas": "0x300",
    }))

    gas = relay.estimate_user_operation_gas(INTENTS)

    assert (gas.call_gas_limit, gas.verification_gas_limit, gas.pre_verification_gas) == (256, 512, 768)
    body = requests_mock.last_request.json()
    assert body["method"] == "eth_estimateUserOperationGas"
    user_op, entry_point = body["params"]
    assert entry_point == ENTRY_POINT_ADDRESS
    assert user_op["sender"] == TEST_WALLET_ADDRESS
    assert user_op["callGasLimit"] == "0x0"


def test_send_submits_signed_operation(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, json=rpc_result("0xophash"))
    gas = UserOperationGas(call_gas_limit=140, verification_gas_limit=280, pre_verification_gas=420)

    assert relay.send_user_operation(INTENTS, gas) == "0xophash"

    user_op = requests_mock.last_request.json()["params"][0]
    assert user_op["callGasLimit"] == hex(140)
    assert user_op["verificationGasLimit"] == hex(280)
    assert user_op["preVerificationGas"] == hex(420)
    assert user_op["signature"] != relay.account.get_stub_signature()


def test_rpc_error_becomes_relay_error(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, json={
        "jsonrpc": "2.0", "id": 1,
        "error": {"code": -32500, "message": "AA21 didn't pay prefund", "data": {"reason": "funds"}},
    })

    with pytest.raises(RelayError) as exc_info:
        relay.estimate_user_operation_gas(INTENTS)

    assert "AA21" in str(exc_info.value)
    assert exc_info.value.code == -32500
    assert exc_info.value.data == {"reason": "funds"}


def test_transport_failure_becomes_relay_error(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, exc=requests.ConnectionError("refused"))
    with pytest.raises(RelayError, match="refused"):
        relay.get_user_operation_receipt("0xophash")


def test_http_error_without_rpc_error(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, status_code=502, json={"jsonrpc": "2.0", "id": 1})
    with pytest.raises(RelayError, match="HTTP 502"):
        relay.get_user_operation_receipt("0xophash")


def test_non_json_body(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, text="<html>")
    with pytest.raises(RelayError, match="Invalid JSON"):
        relay.get_user_operation_receipt("0xophash")


def test_pending_receipt_is_none(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, json=rpc_result(None))
    assert relay.get_user_operation_receipt("0xophash") is None


def test_wait_polls_until_receipt(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, [
        {"json": rpc_result(None)},
        {"json": rpc_result(None)},
        {"json": rpc_result({"userOpHash": "0xophash", "success": True, "receipt": {"transactionHash": "0xtx"}})},
    ])

    receipt = relay.wait_for_user_operation_receipt("0xophash")

    assert receipt.success
    assert receipt.transaction_hash == "0xtx"
    assert requests_mock.call_count == 3


def test_wait_times_out(requests_mock, relay):
    requests_mock.post(TEST_RELAY_URL, json=rpc_result(None))
    with pytest.raises(RelayTimeoutError):
        relay.wait_for_user_operation_receipt("0xophash", timeout=0)
