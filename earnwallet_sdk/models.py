"""
Data models for the EarnWallet SDK.
"""
from typing import Dict, Any, Optional, List, Union

from pydantic import BaseModel, Field, field_validator

from .utils import check_valid_url, normalize_address, bump_gas, GAS_BUFFER_PERCENT


class ChainProfile(BaseModel):
    """The single chain an SDK session is configured for"""
    chain_id: int = Field(..., alias="chainId")
    rpc_url: str = Field(..., alias="rpcUrl")
    relay_url: Optional[str] = Field(None, alias="relayUrl")

    @field_validator("rpc_url")
    @classmethod
    def _check_rpc_url(cls, value: str) -> str:
        if not check_valid_url(value):
            raise ValueError(f"Invalid RPC URL: {value}")
        return value

    @field_validator("relay_url")
    @classmethod
    def _check_relay_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not check_valid_url(value):
            raise ValueError(f"Invalid relay URL: {value}")
        return value

    class Config:
        populate_by_name = True
        frozen = True


class ChainMetadata(BaseModel):
    """Static chain table entry"""
    chain_id: int = Field(..., alias="chainId")
    key: str
    name: str
    native_currency: str = Field("ETH", alias="nativeCurrency")
    testnet: bool = False

    class Config:
        populate_by_name = True
        frozen = True


class WebAuthnOwner(BaseModel):
    """Passkey owner identified by its uncompressed P-256 public key (x || y)"""
    public_key: str = Field(..., alias="publicKey")
    credential_id: Optional[str] = Field(None, alias="credentialId")

    @field_validator("public_key")
    @classmethod
    def _check_public_key(cls, value: str) -> str:
        raw = value[2:] if value.startswith("0x") else value
        if len(raw) != 128:
            raise ValueError("WebAuthn public key must be 64 bytes (x || y)")
        bytes.fromhex(raw)
        return "0x" + raw.lower()

    class Config:
        populate_by_name = True
        frozen = True


Owner = Union[str, WebAuthnOwner]


class VaultFees(BaseModel):
    """Fee breakdown reported by a vault index"""
    performance: Optional[float] = None
    withdraw: Optional[float] = None
    deposit: Optional[float] = None


class VaultDescriptor(BaseModel):
    """A vault usable for deposits on the configured chain"""
    id: str
    chain: str
    deposit_token_address: str = Field(..., alias="depositTokenAddress")
    deposit_token_decimals: int = Field(..., alias="depositTokenDecimals", ge=0, le=36)
    vault_address: str = Field(..., alias="vaultAddress")
    earn_token_decimals: Optional[int] = Field(None, alias="earnTokenDecimals", ge=0, le=36)
    apy: Optional[float] = None
    tvl: Optional[float] = None
    fees: Optional[VaultFees] = None
    name: Optional[str] = None
    deposit_token_symbol: Optional[str] = Field(None, alias="depositTokenSymbol")

    @field_validator("deposit_token_address", "vault_address")
    @classmethod
    def _checksum(cls, value: str) -> str:
        return normalize_address(value)

    @property
    def share_decimals(self) -> int:
        return self.earn_token_decimals if self.earn_token_decimals is not None else 18

    class Config:
        populate_by_name = True
        frozen = True


class VaultPosition(BaseModel):
    """A wallet's holding in a vault, as decimal strings"""
    shares: str
    deposited_amount: str = Field(..., alias="depositedAmount")
    price_per_share: Optional[str] = Field(None, alias="pricePerShare")

    class Config:
        populate_by_name = True


class TransactionIntent(BaseModel):
    """A single call executed by the smart wallet"""
    to: str
    data: str = "0x"
    value: int = 0

    @field_validator("to")
    @classmethod
    def _checksum_to(cls, value: str) -> str:
        return normalize_address(value)

    @field_validator("value")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("value must be non-negative")
        return value

    class Config:
        frozen = True


class OperationResult(BaseModel):
    """Outcome of a vault operation, returned after on-chain inclusion"""
    hash: str
    success: bool
    error: Optional[str] = None


class UserOperationGas(BaseModel):
    """Gas limits returned by eth_estimateUserOperationGas"""
    call_gas_limit: int = Field(..., alias="callGasLimit")
    verification_gas_limit: int = Field(..., alias="verificationGasLimit")
    pre_verification_gas: int = Field(..., alias="preVerificationGas")

    @field_validator("call_gas_limit", "verification_gas_limit", "pre_verification_gas", mode="before")
    @classmethod
    def _parse_quantity(cls, value: Any) -> int:
        if isinstance(value, str):
            return int(value, 16) if value.startswith("0x") else int(value)
        return value

    def bumped(self, percent: int = GAS_BUFFER_PERCENT) -> "UserOperationGas":
        """Return a copy with each limit raised by percent, rounding down."""
        return UserOperationGas(
            call_gas_limit=bump_gas(self.call_gas_limit, percent),
            verification_gas_limit=bump_gas(self.verification_gas_limit, percent),
            pre_verification_gas=bump_gas(self.pre_verification_gas, percent),
        )

    class Config:
        populate_by_name = True


class UserOperationReceipt(BaseModel):
    """Receipt returned by eth_getUserOperationReceipt"""
    user_op_hash: str = Field(..., alias="userOpHash")
    success: bool
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    actual_gas_used: Optional[int] = Field(None, alias="actualGasUsed")
    actual_gas_cost: Optional[int] = Field(None, alias="actualGasCost")
    reason: Optional[str] = None

    @field_validator("actual_gas_used", "actual_gas_cost", mode="before")
    @classmethod
    def _parse_quantity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return int(value, 16) if value.startswith("0x") else int(value)
        return value

    @classmethod
    def from_rpc(cls, result: Dict[str, Any]) -> "UserOperationReceipt":
        """Build a receipt from the raw bundler response"""
        data = dict(result)
        receipt = data.get("receipt") or {}
        if "transactionHash" not in data and receipt.get("transactionHash"):
            data["transactionHash"] = receipt["transactionHash"]
        return cls.model_validate(data)

    class Config:
        populate_by_name = True


class ChainBalance(BaseModel):
    """Token balance on one chain"""
    chain_id: int = Field(..., alias="chainId")
    balance: int
    formatted_balance: str = Field(..., alias="formattedBalance")

    class Config:
        populate_by_name = True


class TokenBalance(BaseModel):
    """Token balance aggregated across chains"""
    symbol: str
    total_balance: int = Field(..., alias="totalBalance")
    total_formatted_balance: str = Field(..., alias="totalFormattedBalance")
    chain_balances: List[ChainBalance] = Field(default_factory=list, alias="chainBalances")

    class Config:
        populate_by_name = True


class ProtocolInfo(BaseModel):
    """Static description of a registered vault protocol"""
    id: str
    name: str
    website: str
    logo: str
    supported_chains: List[int] = Field(..., alias="supportedChains")
    risk_level: str = Field(..., alias="riskLevel")
    restricted: bool = Field(False, alias="isPremium")

    class Config:
        populate_by_name = True
        frozen = True


class Amount(BaseModel):
    """A value with its currency, as reported by the ramp provider"""
    value: str
    currency: str


class OnRampFee(BaseModel):
    """A single fee line of an on-ramp quote"""
    type: str
    amount: str
    currency: str


class OnRampQuote(BaseModel):
    """Quote breakdown for a fiat purchase"""
    destination_network: str = Field(..., alias="destinationNetwork")
    exchange_rate: str = Field(..., alias="exchangeRate")
    fees: List[OnRampFee] = Field(default_factory=list)
    payment_currency: str = Field(..., alias="paymentCurrency")
    payment_subtotal: str = Field(..., alias="paymentSubtotal")
    payment_total: str = Field(..., alias="paymentTotal")
    purchase_amount: str = Field(..., alias="purchaseAmount")
    purchase_currency: str = Field(..., alias="purchaseCurrency")

    class Config:
        populate_by_name = True


class OnRampUrlResponse(BaseModel):
    """Redirect URL and quote for a top-up"""
    url: str
    quote: Optional[OnRampQuote] = None


class OffRampUrlResponse(BaseModel):
    """Redirect URL and quote for a cash-out"""
    url: str
    quote_id: str = Field(..., alias="quoteId")
    cashout_total: Amount = Field(..., alias="cashoutTotal")
    cashout_subtotal: Amount = Field(..., alias="cashoutSubtotal")
    sell_amount: Amount = Field(..., alias="sellAmount")
    coinbase_fee: Amount = Field(..., alias="coinbaseFee")

    class Config:
        populate_by_name = True


class RampPaymentMethod(BaseModel):
    id: str


class RampCountry(BaseModel):
    id: str
    subdivisions: List[str] = Field(default_factory=list)
    payment_methods: List[RampPaymentMethod] = Field(default_factory=list)


class RampConfigResponse(BaseModel):
    """Countries and payment methods supported by the ramp provider"""
    countries: List[RampCountry] = Field(default_factory=list)
