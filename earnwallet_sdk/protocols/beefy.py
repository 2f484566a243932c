"""
BeefyProtocol - Beefy Finance auto-compounding share vaults.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import BaseModel, Field, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..abis import BEEFY_VAULT_ABI
from ..exceptions import ConfigError, NoPositionError
from ..models import OperationResult, TransactionIntent, VaultDescriptor, VaultFees, VaultPosition
from ..tokens import STABLE_ASSET
from ..utils import encode_function_call, format_units, normalize_address
from .base import (
    WalletLike,
    build_deposit_intents,
    locate_position,
    parse_positive_amount,
    read_first_available,
    require_initialized,
    select_best,
    zero_position,
)

BEEFY_API_URL = "https://api.beefy.finance"

# Chain keys used by the Beefy API
BEEFY_CHAIN_KEYS = {
    1: "ethereum",
    10: "optimism",
    8453: "base",
    42161: "arbitrum",
}

# Two vault dialects exist; newer vaults expose getPricePerFullShare
PRICE_PER_SHARE_FUNCTIONS = ("getPricePerFullShare", "pricePerShare")

SHARE_PRICE_SCALE = 10 ** 18


class BeefyVaultEntry(BaseModel):
    """One entry of the Beefy /vaults index"""
    id: str
    name: Optional[str] = None
    token: str
    token_address: str = Field(..., alias="tokenAddress")
    token_decimals: int = Field(..., alias="tokenDecimals")
    earn_contract_address: str = Field(..., alias="earnContractAddress")
    earned_token_decimals: Optional[int] = Field(None, alias="earnedTokenDecimals")
    status: str
    chain: str
    assets: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


def _parse_fees(raw: Any) -> Optional[VaultFees]:
    if not isinstance(raw, dict):
        return None
    performance = raw.get("performance")
    if isinstance(performance, dict):
        performance = performance.get("total")
    try:
        return VaultFees(performance=performance, withdraw=raw.get("withdraw"), deposit=raw.get("deposit"))
    except ValidationError:
        return None


class BeefyProtocol:
    """
    Share-vault protocol backed by the Beefy public API.

    Deposits call ``deposit(uint256 assets)``; withdrawals are expressed in
    shares, so partial withdrawals convert the asset amount with the current
    price per share and full withdrawals call ``withdrawAll()``.
    """

    name = "beefy"

    def __init__(
        self,
        api_url: str = BEEFY_API_URL,
        retry_count: int = 3,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.registry = None
        self._vaults: List[VaultDescriptor] = []

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def init(self, registry) -> None:
        """
        Bind to a network registry and fetch the vault index.

        Args:
            registry: NetworkRegistry of the session

        Raises:
            ConfigError: If the Beefy API cannot be reached or returns bad data
        """
        self.registry = registry
        try:
            self._vaults = self._fetch_vaults()
        except Exception:
            self.registry = None
            raise
        self.logger.info(f"Beefy: {len(self._vaults)} vaults available on chain {self.chain_id}")

    @property
    def chain_id(self) -> int:
        require_initialized(self.registry, "Beefy")
        return self.registry.get_supported_chain()

    def _get(self, path: str) -> Any:
        url = f"{self.api_url}/{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise ConfigError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Invalid JSON from {url}: {e}") from e

    def _fetch_vaults(self) -> List[VaultDescriptor]:
        raw_vaults = self._get("vaults")
        apy = self._get("apy") or {}
        fees = self._get("fees") or {}
        tvl = self._get("tvl") or {}
        if not isinstance(raw_vaults, list):
            raise ConfigError("Beefy vault index is not a list")
        for name, table in (("apy", apy), ("fees", fees)):
            if not isinstance(table, dict):
                raise ConfigError(f"Beefy {name} table is not an object")

        chain_key = BEEFY_CHAIN_KEYS.get(self.chain_id)
        chain_tvl = tvl.get(str(self.chain_id), {}) if isinstance(tvl, dict) else {}
        if not isinstance(chain_tvl, dict):
            chain_tvl = {}

        vaults = []
        for raw in raw_vaults:
            vault = self._to_descriptor(raw, chain_key, apy, fees, chain_tvl)
            if vault is not None:
                vaults.append(vault)
        return vaults

    def _to_descriptor(
        self,
        raw: Any,
        chain_key: Optional[str],
        apy: Dict[str, Any],
        fees: Dict[str, Any],
        chain_tvl: Dict[str, Any]
    ) -> Optional[VaultDescriptor]:
        """Validate one index entry; malformed or non-matching entries yield None"""
        try:
            entry = BeefyVaultEntry.model_validate(raw)
        except ValidationError:
            self.logger.debug(f"Dropping malformed Beefy vault entry: {raw.get('id') if isinstance(raw, dict) else raw!r}")
            return None

        if chain_key is None or entry.chain != chain_key:
            return None
        if entry.status != "active" or entry.token.upper() != STABLE_ASSET:
            return None

        try:
            return VaultDescriptor(
                id=entry.id,
                chain=entry.chain,
                name=entry.name,
                deposit_token_symbol=entry.token,
                deposit_token_address=entry.token_address,
                deposit_token_decimals=entry.token_decimals,
                vault_address=entry.earn_contract_address,
                earn_token_decimals=entry.earned_token_decimals,
                apy=apy.get(entry.id),
                tvl=chain_tvl.get(entry.id),
                fees=_parse_fees(fees.get(entry.id)),
            )
        except ValidationError:
            self.logger.debug(f"Dropping Beefy vault {entry.id}: invalid addresses or metrics")
            return None

    def discover_vaults(self, refresh: bool = False) -> List[VaultDescriptor]:
        """USDC vaults on the configured chain; refresh re-fetches the index"""
        require_initialized(self.registry, "Beefy")
        if refresh:
            self._vaults = self._fetch_vaults()
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
        return w3.eth.contract(address=vault.vault_address, abi=BEEFY_VAULT_ABI)

    def _price_per_share(self, vault: VaultDescriptor) -> int:
        return read_first_available(self._vault_contract(vault), PRICE_PER_SHARE_FUNCTIONS, self.logger)

    def deposit(self, amount: str, wallet: WalletLike) -> OperationResult:
        """
        Deposit into the vault already held, or the best vault otherwise.

        Args:
            amount: Asset amount as a decimal string, e.g. "100"
            wallet: Wallet that executes the calls

        Returns:
            Result carrying the user operation hash
        """
        require_initialized(self.registry, "Beefy")
        vault = self.find_existing_position(wallet) or self.select_best_vault()
        raw_amount = parse_positive_amount(amount, vault.deposit_token_decimals)
        owner = normalize_address(wallet.get_address())

        deposit = TransactionIntent(
            to=vault.vault_address,
            data=encode_function_call("deposit", ["uint256"], [raw_amount]),
        )
        w3 = self.registry.get_query_client(self.chain_id)
        intents = build_deposit_intents(w3, vault, owner, raw_amount, deposit)

        self.logger.info(f"Beefy: depositing {amount} into {vault.id}")
        op_hash = wallet.send_batch(intents, self.chain_id)
        return OperationResult(hash=op_hash, success=True)

    def withdraw(self, amount: Optional[str], wallet: WalletLike) -> OperationResult:
        """
        Withdraw from the held vault.

        Args:
            amount: Asset amount to withdraw, or None to exit the position
            wallet: Wallet that executes the call

        Raises:
            NoPositionError: If the wallet holds no Beefy position
        """
        require_initialized(self.registry, "Beefy")
        found = self._locate(wallet)
        if found is None:
            raise NoPositionError("No Beefy position found for this wallet")
        vault, _ = found

        if amount is None:
            data = encode_function_call("withdrawAll", [], [])
        else:
            raw_assets = parse_positive_amount(amount, vault.deposit_token_decimals)
            price = self._price_per_share(vault)
            shares = raw_assets * SHARE_PRICE_SCALE // price
            data = encode_function_call("withdraw", ["uint256"], [shares])

        self.logger.info(f"Beefy: withdrawing {amount or 'everything'} from {vault.id}")
        op_hash = wallet.send(TransactionIntent(to=vault.vault_address, data=data), self.chain_id)
        return OperationResult(hash=op_hash, success=True)

    def get_balance(self, vault: VaultDescriptor, wallet_address: str) -> VaultPosition:
        """
        Read a wallet's position in a vault.

        Zero shares short-circuit without a price read.
        """
        require_initialized(self.registry, "Beefy")
        contract = self._vault_contract(vault)
        shares = contract.functions.balanceOf(normalize_address(wallet_address)).call()
        if shares == 0:
            return zero_position()

        price = self._price_per_share(vault)
        deposited = shares * price // SHARE_PRICE_SCALE
        return VaultPosition(
            shares=format_units(shares, vault.share_decimals),
            deposited_amount=format_units(deposited, vault.deposit_token_decimals),
            price_per_share=format_units(price, 18),
        )
