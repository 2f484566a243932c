"""
Token balance reads.
"""
from web3 import Web3

from .abis import ERC20_ABI
from .utils import normalize_address


def fetch_native_balance(w3: Web3, address: str) -> int:
    """Native currency balance in wei"""
    return w3.eth.get_balance(normalize_address(address))


def fetch_erc20_balance(w3: Web3, token_address: str, address: str) -> int:
    """ERC-20 balance in the token's base units"""
    token = w3.eth.contract(address=normalize_address(token_address), abi=ERC20_ABI)
    return token.functions.balanceOf(normalize_address(address)).call()
