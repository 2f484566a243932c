"""
ProtocolRouter - picks the vault protocol for a session.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from .config import RISK_LEVELS
from .exceptions import InvalidArgumentError, NoProtocolForRiskLevelError
from .protocols.registry import AVAILABLE_PROTOCOLS, ProtocolEntry


class ApiKeyValidator:
    """Gate for restricted protocols. Accepts every key for now."""

    def validate(self, api_key: Optional[str]) -> bool:
        return True


class ProtocolRouter:
    """
    Selects one registered protocol by risk level and the active chain.

    Selection is the first registered match; there is no scoring.
    """

    def __init__(
        self,
        risk_level: str,
        registry,
        min_apy: Optional[float] = None,
        api_key: Optional[str] = None,
        protocols: Optional[Sequence[ProtocolEntry]] = None,
        validator: Optional[ApiKeyValidator] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the router

        Args:
            risk_level: One of "low", "medium" or "high"
            registry: NetworkRegistry providing the active chain
            min_apy: Minimum APY hint; stored but not used for selection yet
            api_key: Credential unlocking restricted protocols
            protocols: Candidate protocols (defaults to AVAILABLE_PROTOCOLS)
            validator: API key validator
            logger: Optional logger instance

        Raises:
            InvalidArgumentError: If the risk level is unknown
        """
        if risk_level not in RISK_LEVELS:
            raise InvalidArgumentError(f"risk_level must be one of {', '.join(RISK_LEVELS)}, got {risk_level!r}")
        self.risk_level = risk_level
        self.registry = registry
        self.min_apy = min_apy
        self.api_key = api_key
        self.protocols = list(protocols) if protocols is not None else list(AVAILABLE_PROTOCOLS)
        self.validator = validator or ApiKeyValidator()
        self.logger = logger or logging.getLogger(__name__)

    def list_eligible_protocols(self) -> List[ProtocolEntry]:
        """Registered protocols, minus restricted ones unless the API key passes"""
        unlocked = self.validator.validate(self.api_key)
        return [entry for entry in self.protocols if not entry.info.restricted or unlocked]

    def is_protocol_supported_chain(self, chain_ids: Iterable[int]) -> bool:
        return self.registry.get_supported_chain() in chain_ids

    def recommend(self) -> ProtocolEntry:
        """
        Return the first eligible protocol with the requested risk level on
        the active chain.

        Raises:
            NoProtocolForRiskLevelError: If no protocol matches
        """
        for entry in self.list_eligible_protocols():
            if entry.info.risk_level == self.risk_level and self.is_protocol_supported_chain(entry.info.supported_chains):
                self.logger.info(f"Selected protocol {entry.info.id} for risk level {self.risk_level}")
                return entry
        raise NoProtocolForRiskLevelError(self.risk_level)
