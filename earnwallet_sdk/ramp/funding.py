"""
Funding namespace: ramp configuration exposed on the SDK session.
"""
from ..models import RampConfigResponse
from .base import RampClient


class FundingNamespace:
    """Read-only view of what the configured ramp supports"""

    def __init__(self, ramp: RampClient):
        self.ramp = ramp

    def get_top_up_config(self) -> RampConfigResponse:
        return self.ramp.get_on_ramp_config()

    def get_cash_out_config(self) -> RampConfigResponse:
        return self.ramp.get_off_ramp_config()
