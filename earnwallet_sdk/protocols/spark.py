"""
SparkProtocol - Spark savings vaults (ERC-4626).
"""
import logging
from typing import List, Optional, Sequence, Tuple

from ..abis import ERC4626_ABI
from ..exceptions import NoPositionError
from ..models import OperationResult, TransactionIntent, VaultDescriptor, VaultPosition
from ..utils import encode_function_call, format_units, normalize_address, parse_units
from .base import (
    WalletLike,
    build_deposit_intents,
    locate_position,
    parse_positive_amount,
    require_initialized,
    select_best,
    zero_position,
)

SPARK_VAULTS = [
    VaultDescriptor(
        id="sUSDC",
        chain="base",
        name="Spark USDC Vault",
        vault_address="0x3128a0f7f0ea68e7b7c9b00afa7e41045828e858",
        deposit_token_address="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
        deposit_token_symbol="USDC",
        deposit_token_decimals=6,
        earn_token_decimals=18,
        apy=0.048,
    ),
]


class SparkProtocol:
    """
    Tokenized-vault protocol. Vault metadata is static; asset values come
    from ``convertToAssets``.
    """

    name = "spark"

    def __init__(
        self,
        vaults: Optional[Sequence[VaultDescriptor]] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.registry = None
        self._known_vaults = list(vaults) if vaults is not None else list(SPARK_VAULTS)
        self._vaults: List[VaultDescriptor] = []

    def init(self, registry) -> None:
        self.registry = registry
        self._vaults = self._load_vaults()

    @property
    def chain_id(self) -> int:
        require_initialized(self.registry, "Spark")
        return self.registry.get_supported_chain()

    def _load_vaults(self) -> List[VaultDescriptor]:
        chain_key = self.registry.get_chain(self.chain_id).key
        return [vault for vault in self._known_vaults if vault.chain == chain_key]

    def discover_vaults(self, refresh: bool = False) -> List[VaultDescriptor]:
        require_initialized(self.registry, "Spark")
        if refresh:
            self._vaults = self._load_vaults()
        return list(self._vaults)

    def select_best_vault(self) -> VaultDescriptor:
        return select_best(self.discover_vaults())

    def _locate(self, wallet: WalletLike) -> Optional[Tuple[VaultDescriptor, VaultPosition]]:
        return locate_position(self.discover_vaults(), wallet.get_address(), self.get_balance)

    def find_existing_position(self, wallet: WalletLike) -> Optional[VaultDescriptor]:
        found = self._locate(wallet)
        return found[0] if found else None

    def _vault_contract(self, vault: VaultDescriptor):
        w3 = self.registry.get_query_client(self.chain_id)
        return w3.eth.contract(address=vault.vault_address, abi=ERC4626_ABI)

    def deposit(self, amount: str, wallet: WalletLike) -> OperationResult:
        """
        Deposit assets into the held vault or the best available one.

        Args:
            amount: Asset amount as a decimal string
            wallet: Wallet that executes the calls

        Returns:
            Result carrying the user operation hash
        """
        require_initialized(self.registry, "Spark")
        vault = self.find_existing_position(wallet) or self.select_best_vault()
        raw_amount = parse_positive_amount(amount, vault.deposit_token_decimals)
        owner = normalize_address(wallet.get_address())

        deposit = TransactionIntent(
            to=vault.vault_address,
            data=encode_function_call("deposit", ["uint256", "address"], [raw_amount, owner]),
        )
        w3 = self.registry.get_query_client(self.chain_id)
        intents = build_deposit_intents(w3, vault, owner, raw_amount, deposit)

        self.logger.info(f"Spark: depositing {amount} into {vault.id}")
        op_hash = wallet.send_batch(intents, self.chain_id)
        return OperationResult(hash=op_hash, success=True)

    def withdraw(self, amount: Optional[str], wallet: WalletLike) -> OperationResult:
        """
        Withdraw assets, or redeem every share when no amount is given.

        Raises:
            NoPositionError: If the wallet holds no Spark position
        """
        require_initialized(self.registry, "Spark")
        found = self._locate(wallet)
        if found is None:
            raise NoPositionError("No Spark position found for this wallet")
        vault, position = found
        owner = normalize_address(wallet.get_address())

        if amount is None:
            shares = parse_units(position.shares, vault.share_decimals)
            data = encode_function_call("redeem", ["uint256", "address", "address"], [shares, owner, owner])
        else:
            raw_assets = parse_positive_amount(amount, vault.deposit_token_decimals)
            data = encode_function_call("withdraw", ["uint256", "address", "address"], [raw_assets, owner, owner])

        self.logger.info(f"Spark: withdrawing {amount or 'everything'} from {vault.id}")
        op_hash = wallet.send(TransactionIntent(to=vault.vault_address, data=data), self.chain_id)
        return OperationResult(hash=op_hash, success=True)

    def get_balance(self, vault: VaultDescriptor, wallet_address: str) -> VaultPosition:
        require_initialized(self.registry, "Spark")
        contract = self._vault_contract(vault)
        shares = contract.functions.balanceOf(normalize_address(wallet_address)).call()
        if shares == 0:
            return zero_position()

        assets = contract.functions.convertToAssets(shares).call()
        return VaultPosition(
            shares=format_units(shares, vault.share_decimals),
            deposited_amount=format_units(assets, vault.deposit_token_decimals),
        )
