"""
Exceptions for the EarnWallet SDK.
"""
from typing import Any, Optional


class EarnWalletError(Exception):
    """Base exception for all SDK errors."""
    pass


class ConfigError(EarnWalletError):
    """Raised when chain or provider configuration is missing or invalid."""
    pass


class NotInitializedError(EarnWalletError):
    """Raised when a vault protocol is used before init() was called."""
    pass


class NoVaultsFoundError(EarnWalletError):
    """Raised when no vault matches the configured chain and asset."""
    pass


class NoPositionError(EarnWalletError):
    """Raised when a withdraw is requested but the wallet holds no vault position."""
    pass


class NoProtocolForRiskLevelError(EarnWalletError):
    """Raised when the router finds no protocol for the requested risk level."""

    def __init__(self, risk_level: str):
        self.risk_level = risk_level
        super().__init__(f"No protocols available for risk level: {risk_level}")


class InvalidArgumentError(EarnWalletError, ValueError):
    """Raised when a caller passes an invalid argument."""
    pass


class UnsupportedAssetError(EarnWalletError):
    """Raised when an asset is not configured for the chain in use."""

    def __init__(self, asset: str, chain_id: int):
        self.asset = asset
        self.chain_id = chain_id
        super().__init__(f"Asset {asset} is not supported on chain {chain_id}")


class SendFailedError(EarnWalletError):
    """Raised when estimating, submitting or awaiting a relayed operation fails."""
    pass


class RampNotConfiguredError(EarnWalletError):
    """Raised when a ramp operation is requested without a ramp client."""

    def __init__(self, message: str = "Ramp client is not configured"):
        super().__init__(message)


class RelayError(EarnWalletError):
    """Raised when the bundler returns a JSON-RPC error."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(message)


class RelayTimeoutError(RelayError):
    """Raised when a user operation receipt does not arrive in time."""
    pass


class RampError(EarnWalletError):
    """Raised when the ramp provider returns an error response."""

    def __init__(
        self,
        message: str,
        error_type: Optional[str] = None,
        correlation_id: Optional[str] = None,
        error_link: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.error_type = error_type
        self.correlation_id = correlation_id
        self.error_link = error_link
        self.status_code = status_code
        super().__init__(message)


class WalletNotFoundError(EarnWalletError):
    """Raised when an embedded wallet or directory entry does not exist."""
    pass
