"""
NetworkRegistry - resolves the configured chain to endpoints and clients.
"""
import logging
import threading
from typing import List, Optional

from pydantic import ValidationError
from web3 import Web3

from .config import NetworkConfig
from .exceptions import ConfigError
from .models import ChainMetadata, ChainProfile
from .relay import RelayClient, SmartAccount
from .utils import check_valid_url

# "ethereum" is accepted as a name for mainnet; there is no reverse alias
CHAIN_NAME_ALIASES = {"ethereum": "mainnet"}


class NetworkRegistry:
    """
    Endpoint and client registry for a single configured chain.

    APIs take a chain ID so callers can be written against several chains,
    but exactly one chain profile is active per session.
    """

    def __init__(
        self,
        profile: ChainProfile,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the registry

        Args:
            profile: Chain ID and endpoints of the session's chain
            logger: Optional logger instance

        Raises:
            ConfigError: If the chain is not in the chain table
        """
        self.profile = profile
        self.logger = logger or logging.getLogger(__name__)
        if NetworkConfig.get_chain_by_id(profile.chain_id) is None:
            raise ConfigError(f"Chain {profile.chain_id} is not supported")

        self._query_client: Optional[Web3] = None
        self._lock = threading.Lock()

    @classmethod
    def from_urls(
        cls,
        chain_id: int,
        rpc_url: str,
        relay_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ) -> "NetworkRegistry":
        """
        Build a registry from raw endpoint strings.

        Raises:
            ConfigError: If an endpoint is not a well-formed HTTP(S) URL
        """
        try:
            profile = ChainProfile(chain_id=chain_id, rpc_url=rpc_url, relay_url=relay_url)
        except ValidationError as e:
            raise ConfigError(f"Invalid chain configuration: {e}") from e
        return cls(profile, logger=logger)

    def _check_chain(self, chain_id: int) -> None:
        if chain_id != self.profile.chain_id:
            raise ConfigError(
                f"No configuration for chain {chain_id} (configured chain is {self.profile.chain_id})"
            )

    def get_supported_chain(self) -> int:
        return self.profile.chain_id

    def get_rpc_url(self, chain_id: int) -> str:
        """
        Get the RPC endpoint for a chain.

        Raises:
            ConfigError: If the chain is not configured or the URL is invalid
        """
        self._check_chain(chain_id)
        if not check_valid_url(self.profile.rpc_url):
            raise ConfigError(f"Invalid RPC URL for chain {chain_id}")
        return self.profile.rpc_url

    def get_relay_url(self, chain_id: int) -> str:
        """
        Get the bundler endpoint for a chain.

        Raises:
            ConfigError: If the chain is not configured or the URL is absent or invalid
        """
        self._check_chain(chain_id)
        relay_url = self.profile.relay_url
        if not relay_url:
            raise ConfigError(f"No relay URL configured for chain {chain_id}")
        if not check_valid_url(relay_url):
            raise ConfigError(f"Invalid relay URL for chain {chain_id}: {relay_url}")
        return relay_url

    def get_query_client(self, chain_id: int) -> Web3:
        """Read-only Web3 client for the configured chain, created once"""
        rpc_url = self.get_rpc_url(chain_id)
        with self._lock:
            if self._query_client is None:
                self.logger.debug(f"Creating query client for chain {chain_id}")
                self._query_client = Web3(Web3.HTTPProvider(rpc_url))
            return self._query_client

    def get_relay_client(self, chain_id: int, account: SmartAccount) -> RelayClient:
        """Bundler client that submits operations for the given account"""
        relay_url = self.get_relay_url(chain_id)
        return RelayClient(relay_url, account, logger=self.logger)

    def get_chain(self, chain_id: int) -> ChainMetadata:
        """
        Get chain metadata by ID.

        Raises:
            ConfigError: If the chain is not in the chain table
        """
        chain = NetworkConfig.get_chain_by_id(chain_id)
        if chain is None:
            raise ConfigError(f"Chain {chain_id} is not supported")
        return chain

    def resolve_chain_by_name(self, name: str) -> int:
        """
        Map a chain name to its ID.

        Raises:
            ConfigError: If the name is unknown
        """
        key = CHAIN_NAME_ALIASES.get(name, name)
        try:
            return NetworkConfig.get_network(key)["chainId"]
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def is_chain_supported(self, name: str) -> bool:
        return name in NetworkConfig.load_networks()

    def get_supported_chain_names(self) -> List[str]:
        return list(NetworkConfig.load_networks())
