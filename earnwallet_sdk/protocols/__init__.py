"""
Vault protocols the smart wallet can earn yield with.
"""
from .base import VaultProtocol, WalletLike
from .beefy import BeefyProtocol
from .spark import SparkProtocol
from .registry import AVAILABLE_PROTOCOLS, ProtocolEntry

__all__ = [
    "VaultProtocol",
    "WalletLike",
    "BeefyProtocol",
    "SparkProtocol",
    "AVAILABLE_PROTOCOLS",
    "ProtocolEntry",
]
