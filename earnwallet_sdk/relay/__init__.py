"""
ERC-4337 user operation building and bundler access.
"""
from .account import (
    SmartAccount,
    SMART_WALLET_FACTORY_ADDRESS,
    ENTRY_POINT_ADDRESS,
    encode_owner,
    user_operation_hash,
)
from .client import RelayClient

__all__ = [
    "SmartAccount",
    "RelayClient",
    "SMART_WALLET_FACTORY_ADDRESS",
    "ENTRY_POINT_ADDRESS",
    "encode_owner",
    "user_operation_hash",
]
