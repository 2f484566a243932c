"""
Statically registered vault protocols.
"""
from dataclasses import dataclass
from typing import Callable, List

from ..models import ProtocolInfo
from .base import VaultProtocol
from .beefy import BeefyProtocol
from .spark import SparkProtocol


@dataclass(frozen=True)
class ProtocolEntry:
    """A protocol's description plus a factory for per-session instances"""
    info: ProtocolInfo
    factory: Callable[[], VaultProtocol]

    def create(self) -> VaultProtocol:
        return self.factory()


# Each entry's supported_chains decides where the router may pick it
AVAILABLE_PROTOCOLS: List[ProtocolEntry] = [
    ProtocolEntry(
        info=ProtocolInfo(
            id="spark",
            name="Spark",
            website="https://spark.fi",
            logo="/logos/spark.png",
            supported_chains=[8453],
            risk_level="low",
            restricted=False,
        ),
        factory=SparkProtocol,
    ),
    ProtocolEntry(
        info=ProtocolInfo(
            id="beefy",
            name="Beefy Finance",
            website="https://beefy.finance",
            logo="/logos/beefy.png",
            supported_chains=[8453],
            risk_level="medium",
            restricted=False,
        ),
        factory=BeefyProtocol,
    ),
]
