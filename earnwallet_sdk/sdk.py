"""
EarnWalletSDK - session facade wiring chain, protocol, ramp and wallets together.
"""
import logging
from typing import Optional, Sequence

from .config import SDKConfig
from .directory import WalletDirectory
from .exceptions import RampNotConfiguredError
from .keystore import KeyStore
from .network import NetworkRegistry
from .protocols.base import VaultProtocol
from .protocols.registry import ProtocolEntry
from .ramp import CoinbaseRampClient, FundingNamespace, RampClient
from .router import ProtocolRouter
from .wallet import (
    EmbeddedWalletProvider,
    KeyStoreEmbeddedWalletProvider,
    SmartWalletProvider,
    WalletProvider,
)


class EarnWalletSDK:
    """
    Entry point of the SDK.

    Construction resolves the chain, picks a vault protocol with the router
    and initialises it, sets up the ramp client when CDP credentials are
    present, and builds the wallet provider.

    Example:
        sdk = EarnWalletSDK(SDKConfig.from_env())
        account = sdk.wallet.create_account()
        account.smart_wallet.earn("10")
    """

    def __init__(
        self,
        config: Optional[SDKConfig] = None,
        embedded_wallet_provider: Optional[EmbeddedWalletProvider] = None,
        ramp: Optional[RampClient] = None,
        protocols: Optional[Sequence[ProtocolEntry]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the SDK

        Args:
            config: Session settings (defaults to SDKConfig() on Base)
            embedded_wallet_provider: Signer source (defaults to a local key store)
            ramp: Ramp client overriding the one built from CDP credentials
            protocols: Candidate protocols for the router
            logger: Optional logger instance

        Raises:
            ConfigError: If the chain or a protocol cannot be set up
            NoProtocolForRiskLevelError: If no protocol matches the risk level
        """
        self.logger = logger or logging.getLogger(__name__)
        if config is None:
            self.logger.warning("No configuration provided, using public Base RPC and relay endpoints")
            config = SDKConfig()
        self.config = config

        self._chain_manager = NetworkRegistry(config.chain_profile(), logger=self.logger)

        if ramp is None and config.ramp_configured:
            ramp = CoinbaseRampClient(
                config.cdp_api_key_id,
                config.cdp_api_key_secret,
                config.integrator_id,
                self._chain_manager,
                logger=self.logger,
            )
        self.ramp = ramp
        self._funding = FundingNamespace(ramp) if ramp is not None else None

        self.router = ProtocolRouter(
            config.risk_level,
            self._chain_manager,
            min_apy=config.min_apy,
            api_key=config.api_key,
            protocols=protocols,
            logger=self.logger,
        )
        self.protocol_entry = self.router.recommend()
        self._protocol = self.protocol_entry.create()
        self._protocol.init(self._chain_manager)

        store = KeyStore(config.key_store_path)
        self.directory = WalletDirectory(store, logger=self.logger)
        self.wallet = WalletProvider(
            embedded_wallet_provider or KeyStoreEmbeddedWalletProvider(store, logger=self.logger),
            SmartWalletProvider(self._chain_manager, protocol=self._protocol, ramp=ramp, logger=self.logger),
            logger=self.logger,
        )

    @property
    def chain_manager(self) -> NetworkRegistry:
        return self._chain_manager

    @property
    def protocol(self) -> VaultProtocol:
        return self._protocol

    @property
    def funding(self) -> FundingNamespace:
        """
        Ramp configuration queries.

        Raises:
            RampNotConfiguredError: If no ramp client is configured
        """
        if self._funding is None:
            raise RampNotConfiguredError(
                "Ramp is not configured. Provide CDP API credentials and an integrator ID"
            )
        return self._funding
