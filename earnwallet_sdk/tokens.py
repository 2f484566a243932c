"""
Registry of tokens the SDK can hold, send and report balances for.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .exceptions import UnsupportedAssetError

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True)
class TokenInfo:
    symbol: str
    name: str
    decimals: int
    addresses: Dict[int, str] = field(default_factory=dict)

    @property
    def is_native(self) -> bool:
        return all(address == NATIVE_TOKEN_ADDRESS for address in self.addresses.values())


SUPPORTED_TOKENS: Dict[str, TokenInfo] = {
    "ETH": TokenInfo(
        symbol="ETH",
        name="Ethereum",
        decimals=18,
        addresses={
            1: NATIVE_TOKEN_ADDRESS,
            130: NATIVE_TOKEN_ADDRESS,
            8453: NATIVE_TOKEN_ADDRESS,
            84532: NATIVE_TOKEN_ADDRESS,
            11155111: NATIVE_TOKEN_ADDRESS,
        },
    ),
    "USDC": TokenInfo(
        symbol="USDC",
        name="USDC",
        decimals=6,
        addresses={
            1: "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
            130: "0x078d782b760474a361dda0af3839290b0ef57ad6",
            8453: "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            84532: "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            11155111: "0xf08A50178dfcDe18524640EA6618a1f965821715",
        },
    ),
}

# Asset used by vault discovery
STABLE_ASSET = "USDC"


def get_token_address(symbol: str, chain_id: int) -> Optional[str]:
    """
    Get the contract address of a token on a chain.

    Args:
        symbol: Token symbol, case-insensitive
        chain_id: Chain ID

    Returns:
        Token address, or None if the token has no deployment on the chain
    """
    token = SUPPORTED_TOKENS.get(symbol.upper())
    if token is None:
        return None
    return token.addresses.get(chain_id)


def find_token_by_address(address: str, chain_id: int) -> Optional[TokenInfo]:
    """Find a token by its address on a chain (case-insensitive)"""
    wanted = address.lower()
    for token in SUPPORTED_TOKENS.values():
        token_address = token.addresses.get(chain_id)
        if token_address and token_address.lower() == wanted:
            return token
    return None


def resolve_asset(asset: str, chain_id: int) -> Tuple[TokenInfo, str]:
    """
    Resolve an ERC-20 asset given as a symbol or an address.

    Args:
        asset: Token symbol (e.g. "usdc") or token address
        chain_id: Chain ID

    Returns:
        Tuple of (token info, token address on the chain)

    Raises:
        UnsupportedAssetError: If the asset has no deployment on the chain
    """
    if asset.startswith("0x"):
        token = find_token_by_address(asset, chain_id)
    else:
        token = SUPPORTED_TOKENS.get(asset.upper())

    address = token.addresses.get(chain_id) if token else None
    if token is None or address is None or address == NATIVE_TOKEN_ADDRESS:
        raise UnsupportedAssetError(asset, chain_id)
    return token, address


def erc20_tokens_on_chain(chain_id: int) -> Dict[str, TokenInfo]:
    """ERC-20 tokens (native currency excluded) that have an address on the chain"""
    return {
        symbol: token
        for symbol, token in SUPPORTED_TOKENS.items()
        if not token.is_native and chain_id in token.addresses
    }
