"""
Smart wallets, embedded signers and the providers that create them.
"""
from .smart_wallet import SmartWallet
from .embedded import EmbeddedWallet, EmbeddedWalletProvider, KeyStoreEmbeddedWalletProvider
from .provider import AccountResult, SmartWalletProvider, WalletProvider

__all__ = [
    "SmartWallet",
    "EmbeddedWallet",
    "EmbeddedWalletProvider",
    "KeyStoreEmbeddedWalletProvider",
    "AccountResult",
    "SmartWalletProvider",
    "WalletProvider",
]
