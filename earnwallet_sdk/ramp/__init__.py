"""
Fiat on/off-ramp providers.
"""
from .base import RampClient
from .cdp import CoinbaseRampClient, load_signing_key
from .funding import FundingNamespace

__all__ = ["RampClient", "CoinbaseRampClient", "FundingNamespace", "load_signing_key"]
