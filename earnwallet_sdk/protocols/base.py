"""
Vault protocol capability and the helpers shared by its implementations.
"""
import logging
from decimal import Decimal
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from web3 import Web3
from web3.exceptions import Web3Exception

from .._rate_limited_log import rate_limited_log
from ..abis import ERC20_ABI
from ..exceptions import InvalidArgumentError, NoVaultsFoundError, NotInitializedError
from ..models import OperationResult, TransactionIntent, VaultDescriptor, VaultPosition
from ..utils import encode_function_call, normalize_address, parse_units

logger = logging.getLogger(__name__)


def zero_position() -> VaultPosition:
    return VaultPosition(shares="0", deposited_amount="0")


class WalletLike(Protocol):
    """What a vault protocol needs from the wallet it operates on"""

    def get_address(self) -> str:
        ...

    def send(self, intent: TransactionIntent, chain_id: int) -> str:
        ...

    def send_batch(self, intents: Sequence[TransactionIntent], chain_id: int) -> str:
        ...


@runtime_checkable
class VaultProtocol(Protocol):
    """
    A yield protocol the smart wallet can deposit into.

    init() must be called once before any other method.
    """

    def init(self, registry) -> None:
        ...

    def discover_vaults(self, refresh: bool = False) -> List[VaultDescriptor]:
        ...

    def select_best_vault(self) -> VaultDescriptor:
        ...

    def find_existing_position(self, wallet: WalletLike) -> Optional[VaultDescriptor]:
        ...

    def deposit(self, amount: str, wallet: WalletLike) -> OperationResult:
        ...

    def withdraw(self, amount: Optional[str], wallet: WalletLike) -> OperationResult:
        ...

    def get_balance(self, vault: VaultDescriptor, wallet_address: str) -> VaultPosition:
        ...


def require_initialized(registry, name: str) -> None:
    if registry is None:
        raise NotInitializedError(f"{name} protocol is not initialized; call init() first")


def parse_positive_amount(amount: str, decimals: int) -> int:
    """
    Convert a human amount to base units, rejecting zero and negative values.

    Raises:
        InvalidArgumentError: If the amount is not a positive number
    """
    raw = parse_units(amount, decimals)
    if raw <= 0:
        raise InvalidArgumentError(f"Amount must be greater than 0, got {amount!r}")
    return raw


def select_best(vaults: Sequence[VaultDescriptor]) -> VaultDescriptor:
    """
    Pick the vault with the highest APY.

    The sort is stable, so equal APYs keep their discovery order; a missing
    APY counts as 0.

    Raises:
        NoVaultsFoundError: If there are no candidates
    """
    if not vaults:
        raise NoVaultsFoundError("No vaults found for the configured chain")
    return sorted(vaults, key=lambda vault: vault.apy or 0, reverse=True)[0]


def locate_position(
    vaults: Sequence[VaultDescriptor],
    wallet_address: str,
    read_position: Callable[[VaultDescriptor, str], VaultPosition]
) -> Optional[Tuple[VaultDescriptor, VaultPosition]]:
    """
    Scan vaults in order and return the last one holding a positive deposit.

    A wallet holding positions in several vaults gets the last of them, not
    the largest.
    """
    found = None
    for vault in vaults:
        position = read_position(vault, wallet_address)
        if Decimal(position.deposited_amount) > 0:
            found = (vault, position)
    return found


def read_allowance(w3: Web3, token_address: str, owner: str, spender: str) -> int:
    token = w3.eth.contract(address=normalize_address(token_address), abi=ERC20_ABI)
    return token.functions.allowance(normalize_address(owner), normalize_address(spender)).call()


def approve_intent(token_address: str, spender: str, amount: int) -> TransactionIntent:
    return TransactionIntent(
        to=token_address,
        data=encode_function_call("approve", ["address", "uint256"], [normalize_address(spender), amount]),
    )


def build_deposit_intents(
    w3: Web3,
    vault: VaultDescriptor,
    owner: str,
    amount: int,
    deposit: TransactionIntent
) -> List[TransactionIntent]:
    """
    Prepend an approval for exactly the deposit amount when the current
    allowance does not cover it.
    """
    allowance = read_allowance(w3, vault.deposit_token_address, owner, vault.vault_address)
    intents = []
    if allowance < amount:
        logger.debug(f"Allowance {allowance} < {amount}, adding approval for {vault.vault_address}")
        intents.append(approve_intent(vault.deposit_token_address, vault.vault_address, amount))
    intents.append(deposit)
    return intents


def read_first_available(
    contract,
    function_names: Sequence[str],
    log: Optional[logging.Logger] = None
) -> int:
    """
    Call view functions in order until one succeeds.

    Args:
        contract: web3 contract
        function_names: Zero-argument view functions to try, in order

    Returns:
        Result of the first call that did not fail

    Raises:
        Web3Exception, ValueError: The last call's error if every function failed
    """
    if not function_names:
        raise ValueError("At least one function name is required")
    last_error: Optional[Exception] = None
    for index, name in enumerate(function_names):
        try:
            value = getattr(contract.functions, name)().call()
        except (Web3Exception, ValueError) as e:
            last_error = e
            continue
        if index > 0:
            rate_limited_log(
                f"{function_names[0]} failed on {contract.address}, used {name}",
                level="warning",
                logger_instance=log or logger,
            )
        return value
    raise last_error
