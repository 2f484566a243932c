"""
Configuration for the EarnWallet SDK.

Chain metadata ships with the package in ``chains.json``; session settings are
read from environment variables.
"""
import os
import json
import logging
import importlib.resources
from typing import Dict, Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .models import ChainMetadata, ChainProfile

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_ID = 8453
DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_RELAY_URL = "https://public.pimlico.io/v2/8453/rpc"
DEFAULT_RISK_LEVEL = "low"

RISK_LEVELS = ("low", "medium", "high")


class NetworkConfig:
    """Access to the bundled chain table"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the chain table, caching it after the first read.

        Returns:
            Mapping of chain key (e.g. "base") to its raw configuration
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("earnwallet_sdk").joinpath("chains.json")
            with resource.open("r") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        """
        Get the raw configuration of a chain by key.

        Raises:
            ValueError: If the chain is unknown; the message lists known chains
        """
        networks = cls.load_networks()
        if name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Network '{name}' not found. Available networks: {available}")
        return networks[name]

    @classmethod
    def get_chain(cls, name: str) -> ChainMetadata:
        """Get typed metadata for a chain key"""
        return ChainMetadata(key=name, **cls.get_network(name))

    @classmethod
    def get_chain_by_id(cls, chain_id: int) -> Optional[ChainMetadata]:
        """Find chain metadata by numeric id, or None if the chain is not listed"""
        for name, entry in cls.load_networks().items():
            if entry.get("chainId") == chain_id:
                return ChainMetadata(key=name, **entry)
        return None


class SDKConfig(BaseModel):
    """Settings for one SDK session"""
    chain_id: int = DEFAULT_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    relay_url: Optional[str] = DEFAULT_RELAY_URL
    risk_level: str = DEFAULT_RISK_LEVEL
    min_apy: Optional[float] = None
    api_key: Optional[str] = None
    integrator_id: Optional[str] = None
    cdp_api_key_id: Optional[str] = None
    cdp_api_key_secret: Optional[str] = Field(None, repr=False)
    key_store_path: Optional[str] = None

    @field_validator("risk_level")
    @classmethod
    def _check_risk_level(cls, value: str) -> str:
        value = value.lower()
        if value not in RISK_LEVELS:
            raise ValueError(f"risk_level must be one of {', '.join(RISK_LEVELS)}")
        return value

    @property
    def ramp_configured(self) -> bool:
        return bool(self.cdp_api_key_id and self.cdp_api_key_secret and self.integrator_id)

    def chain_profile(self) -> ChainProfile:
        """
        Build the validated chain profile for this session.

        Raises:
            ConfigError: If an endpoint URL is malformed
        """
        try:
            return ChainProfile(
                chain_id=self.chain_id,
                rpc_url=self.rpc_url,
                relay_url=self.relay_url,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid chain configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "SDKConfig":
        """
        Read settings from environment variables.

        Without EARNWALLET_CHAIN_ID the SDK falls back to Base mainnet with its
        public RPC and relay endpoints. A non-default chain needs
        EARNWALLET_RPC_URL.

        Raises:
            ConfigError: If a variable has an invalid value or is missing
        """
        env = os.environ if environ is None else environ

        raw_chain_id = env.get("EARNWALLET_CHAIN_ID")
        if raw_chain_id:
            try:
                chain_id = int(raw_chain_id)
            except ValueError as e:
                raise ConfigError(f"EARNWALLET_CHAIN_ID must be an integer, got {raw_chain_id!r}") from e
        else:
            logger.warning(f"No chain configured, defaulting to Base ({DEFAULT_CHAIN_ID})")
            chain_id = DEFAULT_CHAIN_ID

        rpc_url = env.get("EARNWALLET_RPC_URL")
        relay_url = env.get("EARNWALLET_RELAY_URL")
        if chain_id == DEFAULT_CHAIN_ID:
            rpc_url = rpc_url or DEFAULT_RPC_URL
            relay_url = relay_url or DEFAULT_RELAY_URL
        elif not rpc_url:
            raise ConfigError(f"EARNWALLET_RPC_URL is required for chain {chain_id}")

        min_apy = env.get("EARNWALLET_MIN_APY")
        try:
            return cls(
                chain_id=chain_id,
                rpc_url=rpc_url,
                relay_url=relay_url,
                risk_level=env.get("EARNWALLET_RISK_LEVEL", DEFAULT_RISK_LEVEL),
                min_apy=float(min_apy) if min_apy else None,
                api_key=env.get("EARNWALLET_API_KEY"),
                integrator_id=env.get("EARNWALLET_INTEGRATOR_ID"),
                cdp_api_key_id=env.get("CDP_API_KEY_ID"),
                cdp_api_key_secret=env.get("CDP_API_KEY_SECRET"),
                key_store_path=env.get("EARNWALLET_KEY_STORE_PATH"),
            )
        except (ValidationError, ValueError) as e:
            raise ConfigError(f"Invalid SDK configuration: {e}") from e
