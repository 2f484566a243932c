"""
EarnWallet SDK - smart wallets that earn yield in vault protocols.
"""
from .sdk import EarnWalletSDK
from .config import SDKConfig, NetworkConfig
from .network import NetworkRegistry
from .router import ProtocolRouter
from .directory import WalletDirectory
from .signer import LocalSigner, Signer
from .wallet import SmartWallet, WalletProvider
from .protocols import BeefyProtocol, SparkProtocol, VaultProtocol
from .ramp import CoinbaseRampClient, FundingNamespace
from .models import (
    OperationResult,
    TokenBalance,
    TransactionIntent,
    VaultDescriptor,
    VaultPosition,
    WebAuthnOwner,
)
from .exceptions import (
    EarnWalletError,
    ConfigError,
    NotInitializedError,
    NoVaultsFoundError,
    NoPositionError,
    NoProtocolForRiskLevelError,
    InvalidArgumentError,
    UnsupportedAssetError,
    SendFailedError,
    RampNotConfiguredError,
    RelayError,
    RelayTimeoutError,
    RampError,
    WalletNotFoundError,
)
from .version import __version__

__all__ = [
    "EarnWalletSDK",
    "SDKConfig",
    "NetworkConfig",
    "NetworkRegistry",
    "ProtocolRouter",
    "WalletDirectory",
    "LocalSigner",
    "Signer",
    "SmartWallet",
    "WalletProvider",
    "BeefyProtocol",
    "SparkProtocol",
    "VaultProtocol",
    "CoinbaseRampClient",
    "FundingNamespace",
    "OperationResult",
    "TokenBalance",
    "TransactionIntent",
    "VaultDescriptor",
    "VaultPosition",
    "WebAuthnOwner",
    "EarnWalletError",
    "ConfigError",
    "NotInitializedError",
    "NoVaultsFoundError",
    "NoPositionError",
    "NoProtocolForRiskLevelError",
    "InvalidArgumentError",
    "UnsupportedAssetError",
    "SendFailedError",
    "RampNotConfiguredError",
    "RelayError",
    "RelayTimeoutError",
    "RampError",
    "WalletNotFoundError",
    "__version__",
]
