"""
Shared constants and fakes for EarnWallet SDK tests.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence
from unittest.mock import MagicMock

from eth_abi import decode
from eth_utils import function_signature_to_4byte_selector

from earnwallet_sdk.models import TransactionIntent

# Test constants used throughout tests
TEST_CHAIN_ID = 8453
TEST_RPC_URL = "https://rpc.example.com"
TEST_RELAY_URL = "https://relay.example.com/rpc"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_WALLET_ADDRESS = "0x1234567890123456789012345678901234567890"
TEST_OWNER_ADDRESS = "0x2345678901234567890123456789012345678901"
TEST_RECIPIENT = "0x3456789012345678901234567890123456789012"
BASE_USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
VAULT_A = "0x1111111111111111111111111111111111111111"
VAULT_B = "0x2222222222222222222222222222222222222222"
VAULT_C = "0x3333333333333333333333333333333333333333"


class FakeCall:
    """Result of contract.functions.<name>(...); call() returns or raises"""

    def __init__(self, value: Any):
        self.value = value

    def call(self):
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        handlers = self._contract.handlers
        if name not in handlers:
            raise AttributeError(name)

        def function(*args):
            self._contract.calls.append((name, args))
            handler = handlers[name]
            return FakeCall(handler(*args) if callable(handler) else handler)

        return function


class FakeContract:
    """
    Minimal stand-in for a web3 contract.

    handlers maps a function name to a constant result, an exception
    instance (raised by call()), or a callable receiving the call arguments.
    """

    def __init__(self, address: str, handlers: Dict[str, Any], calls: List):
        self.address = address
        self.handlers = handlers
        self.calls = calls
        self.functions = FakeFunctions(self)


def make_fake_w3(
    contracts: Optional[Dict[str, Dict[str, Any]]] = None,
    native_balance: int = 0,
    code: bytes = b"",
    base_fee: int = 1_000_000_000,
    priority_fee: int = 100_000_000
) -> MagicMock:
    """
    Web3 double whose eth.contract() returns FakeContracts keyed by address
    (case-insensitive). Every contract call is recorded in w3.calls as
    (address, function name, args).
    """
    contracts = {address.lower(): handlers for address, handlers in (contracts or {}).items()}
    w3 = MagicMock()
    w3.calls = []

    def contract(address, abi):
        handlers = contracts.get(address.lower(), {})
        recorder = _AddressRecorder(address, w3.calls)
        return FakeContract(address, handlers, recorder)

    w3.eth.contract.side_effect = contract
    w3.eth.get_balance.return_value = native_balance
    w3.eth.get_code.return_value = code
    w3.eth.get_block.return_value = {"baseFeePerGas": base_fee}
    w3.eth.max_priority_fee = priority_fee
    return w3


class _AddressRecorder:
    """List-like sink that tags recorded calls with the contract address"""

    def __init__(self, address: str, sink: List):
        self.address = address
        self.sink = sink

    def append(self, item):
        name, args = item
        self.sink.append((self.address.lower(), name, args))


def calls_to(w3: MagicMock, name: str) -> List[tuple]:
    return [call for call in w3.calls if call[1] == name]


class FakeWallet:
    """Records what a vault protocol asks the wallet to send"""

    def __init__(self, address: str = TEST_WALLET_ADDRESS, op_hash: str = "0xophash"):
        self.address = address
        self.op_hash = op_hash
        self.batches: List[List[TransactionIntent]] = []

    def get_address(self) -> str:
        return self.address

    def send(self, intent: TransactionIntent, chain_id: int) -> str:
        return self.send_batch([intent], chain_id)

    def send_batch(self, intents: Sequence[TransactionIntent], chain_id: int) -> str:
        self.batches.append(list(intents))
        return self.op_hash


def selector(signature: str) -> str:
    return "0x" + function_signature_to_4byte_selector(signature).hex()


def decode_call(data: str, types: Sequence[str]) -> tuple:
    """Decode the arguments of 0x-prefixed calldata (selector stripped)"""
    return decode(list(types), bytes.fromhex(data[10:]))


def counter(value: Any) -> Callable:
    """Handler that returns value and counts invocations in .count"""
    def handler(*args):
        handler.count += 1
        if isinstance(value, Exception):
            raise value
        return value
    handler.count = 0
    return handler
