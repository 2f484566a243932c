"""
SmartAccount - builds and signs ERC-4337 (EntryPoint v0.6) user operations for
a Coinbase-style multi-owner smart wallet.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode
from eth_utils import keccak
from web3 import Web3

from ..abis import ENTRY_POINT_ABI, SMART_WALLET_FACTORY_ABI
from ..exceptions import InvalidArgumentError
from ..models import Owner, TransactionIntent, UserOperationGas, WebAuthnOwner
from ..signer import Signer
from ..utils import encode_function_call, normalize_address, to_bytes, to_hex

logger = logging.getLogger(__name__)

SMART_WALLET_FACTORY_ADDRESS = "0xBA5ED110eFDBa3D005bfC882d75358ACBbB85842"
ENTRY_POINT_ADDRESS = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"

# ECDSA signature accepted by the account during simulation
DUMMY_SIGNATURE = "0x" + "f" * 31 + "0" * 33 + "7" + "a" * 63 + "1c"

CALL_TYPE = "(address,uint256,bytes)"


def encode_owner(owner: Owner) -> bytes:
    """
    Encode an owner the way the factory expects it.

    Addresses become a 32-byte left-padded word; WebAuthn owners are their
    raw 64-byte public key.
    """
    if isinstance(owner, WebAuthnOwner):
        return to_bytes(owner.public_key)
    if isinstance(owner, str):
        return encode(["address"], [normalize_address(owner)])
    raise InvalidArgumentError(f"Unsupported owner type: {type(owner).__name__}")


def wrap_signature(owner_index: int, signature_data: bytes) -> bytes:
    """ABI-encode a SignatureWrapper(uint8 ownerIndex, bytes signatureData)"""
    return encode(["(uint8,bytes)"], [(owner_index, signature_data)])


def user_operation_hash(user_op: Dict[str, Any], entry_point: str, chain_id: int) -> bytes:
    """
    Compute the EntryPoint v0.6 hash of a user operation.

    Args:
        user_op: Operation with integer quantities and hex byte fields
        entry_point: EntryPoint contract address
        chain_id: Chain ID

    Returns:
        32-byte operation hash
    """
    packed = encode(
        ["address", "uint256", "bytes32", "bytes32", "uint256",
         "uint256", "uint256", "uint256", "uint256", "bytes32"],
        [
            user_op["sender"],
            user_op["nonce"],
            keccak(to_bytes(user_op["initCode"])),
            keccak(to_bytes(user_op["callData"])),
            user_op["callGasLimit"],
            user_op["verificationGasLimit"],
            user_op["preVerificationGas"],
            user_op["maxFeePerGas"],
            user_op["maxPriorityFeePerGas"],
            keccak(to_bytes(user_op["paymasterAndData"])),
        ],
    )
    return keccak(encode(["bytes32", "address", "uint256"], [keccak(packed), entry_point, chain_id]))


def to_rpc_user_operation(user_op: Dict[str, Any]) -> Dict[str, str]:
    """Hex-encode integer fields for JSON-RPC"""
    return {
        key: hex(value) if isinstance(value, int) else value
        for key, value in user_op.items()
    }


class SmartAccount:
    """
    User operation builder for one owner set on one chain.

    The account address is derived from the owners and salt through the
    factory, so an undeployed account can be funded and addressed; the first
    operation carries initCode and deploys it.
    """

    def __init__(
        self,
        w3: Web3,
        owners: Sequence[Owner],
        signer: Signer,
        chain_id: int,
        owner_index: int = 0,
        salt: int = 0,
        address: Optional[str] = None,
        factory_address: str = SMART_WALLET_FACTORY_ADDRESS,
        entry_point: str = ENTRY_POINT_ADDRESS,
        logger: Optional[logging.Logger] = None
    ):
        if not owners:
            raise InvalidArgumentError("At least one owner is required")
        # With a known address the owner list may be partial, so only a
        # derived account needs the signer to be in it
        if owner_index < 0 or (address is None and owner_index >= len(owners)):
            raise InvalidArgumentError(f"Owner index {owner_index} out of range for {len(owners)} owners")

        self.w3 = w3
        self.owners = list(owners)
        self.signer = signer
        self.chain_id = chain_id
        self.owner_index = owner_index
        self.salt = salt
        self.factory_address = normalize_address(factory_address)
        self.entry_point = normalize_address(entry_point)
        self.logger = logger or logging.getLogger(__name__)
        self._address = normalize_address(address) if address else None

    @property
    def owner_bytes(self) -> List[bytes]:
        return [encode_owner(owner) for owner in self.owners]

    def get_address(self) -> str:
        """Counterfactual account address, read once from the factory"""
        if self._address is None:
            factory = self.w3.eth.contract(address=self.factory_address, abi=SMART_WALLET_FACTORY_ABI)
            address = factory.functions.getAddress(self.owner_bytes, self.salt).call()
            self._address = normalize_address(address)
            self.logger.debug(f"Derived smart account address {self._address}")
        return self._address

    def is_deployed(self) -> bool:
        code = self.w3.eth.get_code(self.get_address())
        return len(code) > 0

    def get_factory_data(self) -> str:
        return encode_function_call("createAccount", ["bytes[]", "uint256"], [self.owner_bytes, self.salt])

    def get_init_code(self) -> str:
        """initCode for the next operation: empty once the account is deployed"""
        if self.is_deployed():
            return "0x"
        return self.factory_address + self.get_factory_data()[2:]

    def get_nonce(self) -> int:
        entry_point = self.w3.eth.contract(address=self.entry_point, abi=ENTRY_POINT_ABI)
        return entry_point.functions.getNonce(self.get_address(), 0).call()

    def encode_calls(self, intents: Sequence[TransactionIntent]) -> str:
        """Encode intents as execute() for one call or executeBatch() for several"""
        if not intents:
            raise InvalidArgumentError("At least one call is required")
        if len(intents) == 1:
            intent = intents[0]
            return encode_function_call(
                "execute",
                ["address", "uint256", "bytes"],
                [intent.to, intent.value, to_bytes(intent.data)],
            )
        calls = [(intent.to, intent.value, to_bytes(intent.data)) for intent in intents]
        return encode_function_call("executeBatch", [f"{CALL_TYPE}[]"], [calls])

    def get_fees(self) -> Dict[str, int]:
        """EIP-1559 fee caps: twice the latest base fee plus the priority fee"""
        block = self.w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas") or 0
        priority_fee = self.w3.eth.max_priority_fee
        return {
            "maxFeePerGas": base_fee * 2 + priority_fee,
            "maxPriorityFeePerGas": priority_fee,
        }

    def get_stub_signature(self) -> str:
        return to_hex(wrap_signature(self.owner_index, to_bytes(DUMMY_SIGNATURE)))

    def build_user_operation(
        self,
        intents: Sequence[TransactionIntent],
        gas: Optional[UserOperationGas] = None
    ) -> Dict[str, Any]:
        """
        Assemble an unsigned user operation.

        Without gas limits the operation is suitable for estimation and
        carries zero limits and the stub signature.
        """
        fees = self.get_fees()
        return {
            "sender": self.get_address(),
            "nonce": self.get_nonce(),
            "initCode": self.get_init_code(),
            "callData": self.encode_calls(intents),
            "callGasLimit": gas.call_gas_limit if gas else 0,
            "verificationGasLimit": gas.verification_gas_limit if gas else 0,
            "preVerificationGas": gas.pre_verification_gas if gas else 0,
            "maxFeePerGas": fees["maxFeePerGas"],
            "maxPriorityFeePerGas": fees["maxPriorityFeePerGas"],
            "paymasterAndData": "0x",
            "signature": self.get_stub_signature(),
        }

    def sign_user_operation(self, user_op: Dict[str, Any]) -> str:
        """Sign the operation hash with the configured owner and wrap the signature"""
        op_hash = user_operation_hash(user_op, self.entry_point, self.chain_id)
        raw_signature = self.signer.sign_hash(op_hash)
        return to_hex(wrap_signature(self.owner_index, raw_signature))
