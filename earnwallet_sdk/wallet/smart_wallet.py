"""
SmartWallet - executes calls through an ERC-4337 smart account and delegates
yield operations to the active vault protocol.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Union

from ..balances import fetch_erc20_balance, fetch_native_balance
from ..exceptions import InvalidArgumentError, RampNotConfiguredError, RelayError, SendFailedError
from ..models import (
    ChainBalance,
    OffRampUrlResponse,
    OnRampUrlResponse,
    OperationResult,
    Owner,
    TokenBalance,
    TransactionIntent,
    VaultPosition,
)
from ..protocols.base import VaultProtocol
from ..relay import SmartAccount
from ..signer import Signer
from ..tokens import SUPPORTED_TOKENS, TokenInfo, erc20_tokens_on_chain, resolve_asset
from ..utils import encode_function_call, format_units, normalize_address, parse_units


class SmartWallet:
    """
    A deterministic smart wallet owned by one or more owners.

    The wallet works the same before and after deployment: its address is
    derived from the owners and salt, and the first relayed operation deploys
    it. Overlapping send_batch() calls on one wallet can race the account
    nonce, so callers must serialize sends per wallet.
    """

    def __init__(
        self,
        owners: Sequence[Owner],
        signer: Signer,
        registry,
        protocol: Optional[VaultProtocol] = None,
        ramp=None,
        deployment_address: Optional[str] = None,
        signer_owner_index: int = 0,
        salt: int = 0,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the wallet

        Args:
            owners: Ordered owner list (addresses or WebAuthn owners)
            signer: Signer for the owner at signer_owner_index
            registry: NetworkRegistry of the session
            protocol: Initialized vault protocol used by earn/withdraw
            ramp: Optional ramp client for top_up/cash_out
            deployment_address: Known wallet address, skips derivation
            signer_owner_index: Index of the signer in owners
            salt: Salt for address derivation
            logger: Optional logger instance

        Raises:
            InvalidArgumentError: If owners is empty
        """
        if not owners:
            raise InvalidArgumentError("At least one owner is required")
        self.owners = list(owners)
        self.signer = signer
        self.registry = registry
        self.protocol = protocol
        self.ramp = ramp
        self.signer_owner_index = signer_owner_index
        self.salt = salt
        self.logger = logger or logging.getLogger(__name__)
        self._address = normalize_address(deployment_address) if deployment_address else None

    @property
    def chain_id(self) -> int:
        return self.registry.get_supported_chain()

    def get_smart_account(self, chain_id: int) -> SmartAccount:
        """User operation builder for this wallet's owners on a chain"""
        return SmartAccount(
            w3=self.registry.get_query_client(chain_id),
            owners=self.owners,
            signer=self.signer,
            chain_id=chain_id,
            owner_index=self.signer_owner_index,
            salt=self.salt,
            address=self._address,
            logger=self.logger,
        )

    def get_address(self) -> str:
        """
        Wallet address: the deployment address if one was given, otherwise
        derived through the factory. Cached after the first call.
        """
        if self._address is None:
            self._address = self.get_smart_account(self.chain_id).get_address()
        return self._address

    def send(self, intent: TransactionIntent, chain_id: int) -> str:
        """Send one call; see send_batch()"""
        return self.send_batch([intent], chain_id)

    def send_batch(self, intents: Sequence[TransactionIntent], chain_id: int) -> str:
        """
        Send calls as one user operation and wait for inclusion.

        Each of the estimated call, verification and pre-verification gas
        limits is raised by 40% (rounded down) before submission.

        Args:
            intents: Calls to execute atomically, in order
            chain_id: Target chain ID

        Returns:
            User operation hash

        Raises:
            SendFailedError: If estimation, submission or inclusion fails
        """
        try:
            account = self.get_smart_account(chain_id)
            relay = self.registry.get_relay_client(chain_id, account)

            gas = relay.estimate_user_operation_gas(intents)
            op_hash = relay.send_user_operation(intents, gas.bumped())
            receipt = relay.wait_for_user_operation_receipt(op_hash)
            if not receipt.success:
                raise RelayError(f"User operation {op_hash} reverted: {receipt.reason or 'no reason given'}")

            self.logger.info(f"User operation {op_hash} included in {receipt.transaction_hash}")
            return op_hash
        except Exception as e:
            self.logger.error(f"Failed to send transaction: {e}")
            raise SendFailedError(f"Failed to send transaction: {e}") from e

    def _require_protocol(self) -> VaultProtocol:
        if self.protocol is None:
            raise InvalidArgumentError("No vault protocol is bound to this wallet")
        return self.protocol

    def earn(self, amount: str) -> OperationResult:
        """Deposit amount of the vault's asset into the active protocol"""
        return self._require_protocol().deposit(amount, self)

    def withdraw(self, amount: Optional[str] = None) -> OperationResult:
        """Withdraw amount from the active protocol, or everything if omitted"""
        return self._require_protocol().withdraw(amount, self)

    def get_earn_balance(self) -> Optional[VaultPosition]:
        """Position in the active protocol, or None when nothing is deposited"""
        protocol = self._require_protocol()
        vault = protocol.find_existing_position(self)
        if vault is None:
            return None
        return protocol.get_balance(vault, self.get_address())

    def _token_balance(self, token: TokenInfo, chain_id: int, address: str, native: bool) -> TokenBalance:
        w3 = self.registry.get_query_client(chain_id)
        if native:
            raw = fetch_native_balance(w3, address)
        else:
            raw = fetch_erc20_balance(w3, token.addresses[chain_id], address)
        formatted = format_units(raw, token.decimals)
        return TokenBalance(
            symbol=token.symbol,
            total_balance=raw,
            total_formatted_balance=formatted,
            chain_balances=[ChainBalance(chain_id=chain_id, balance=raw, formatted_balance=formatted)],
        )

    def get_balance(self) -> List[TokenBalance]:
        """
        Native and ERC-20 balances on the configured chain.

        Reads run concurrently; the result lists the native currency first,
        then tokens in registry order.
        """
        chain_id = self.chain_id
        address = self.get_address()
        tokens = [(SUPPORTED_TOKENS["ETH"], True)]
        tokens += [(token, False) for token in erc20_tokens_on_chain(chain_id).values()]

        with ThreadPoolExecutor(max_workers=len(tokens)) as executor:
            futures = [
                executor.submit(self._token_balance, token, chain_id, address, native)
                for token, native in tokens
            ]
            return [future.result() for future in futures]

    def send_tokens(
        self,
        amount: Union[str, int, float, Decimal],
        asset: str,
        recipient: str
    ) -> TransactionIntent:
        """
        Build the call that transfers ETH or an ERC-20 token.

        Args:
            amount: Human-readable amount, e.g. "1.5"
            asset: "eth", a token symbol such as "usdc", or a token address
            recipient: Destination address

        Returns:
            Intent ready for send() or send_batch()

        Raises:
            InvalidArgumentError: If recipient is missing or amount <= 0
            UnsupportedAssetError: If the asset is not available on the chain
        """
        if not recipient:
            raise InvalidArgumentError("Recipient address is required")
        try:
            value = Decimal(str(amount))
        except InvalidOperation as e:
            raise InvalidArgumentError(f"Invalid amount: {amount!r}") from e
        if not value.is_finite() or value <= 0:
            raise InvalidArgumentError("Amount must be greater than 0")

        recipient = normalize_address(recipient)
        if asset.lower() == "eth":
            return TransactionIntent(to=recipient, data="0x", value=parse_units(value, 18))

        token, token_address = resolve_asset(asset, self.chain_id)
        data = encode_function_call(
            "transfer",
            ["address", "uint256"],
            [recipient, parse_units(value, token.decimals)],
        )
        return TransactionIntent(to=token_address, data=data, value=0)

    def _require_ramp(self):
        if self.ramp is None:
            raise RampNotConfiguredError()
        return self.ramp

    def top_up(
        self,
        amount: str,
        redirect_url: str,
        purchase_currency: Optional[str] = None,
        payment_currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        country: Optional[str] = None
    ) -> OnRampUrlResponse:
        """Get a link to buy crypto straight into this wallet"""
        ramp = self._require_ramp()
        return ramp.get_on_ramp_link(
            self.get_address(),
            redirect_url,
            amount,
            purchase_currency=purchase_currency,
            payment_currency=payment_currency,
            payment_method=payment_method,
            country=country,
        )

    def cash_out(
        self,
        country: str,
        payment_method: str,
        redirect_url: str,
        sell_amount: str,
        cashout_currency: Optional[str] = None,
        sell_currency: Optional[str] = None
    ) -> OffRampUrlResponse:
        """Get a link to sell crypto from this wallet for fiat"""
        ramp = self._require_ramp()
        return ramp.get_off_ramp_link(
            self.get_address(),
            country,
            payment_method,
            redirect_url,
            sell_amount,
            cashout_currency=cashout_currency,
            sell_currency=sell_currency,
        )
