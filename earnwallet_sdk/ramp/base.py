"""
Interface of fiat on/off-ramp providers.
"""
from typing import Optional, Protocol

from ..models import OffRampUrlResponse, OnRampUrlResponse, RampConfigResponse


class RampClient(Protocol):
    """Produces redirect links (plus quotes) for buying and selling crypto"""

    def get_on_ramp_link(
        self,
        address: str,
        redirect_url: str,
        amount: str,
        purchase_currency: Optional[str] = None,
        payment_currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        country: Optional[str] = None
    ) -> OnRampUrlResponse:
        ...

    def get_off_ramp_link(
        self,
        address: str,
        country: str,
        payment_method: str,
        redirect_url: str,
        sell_amount: str,
        cashout_currency: Optional[str] = None,
        sell_currency: Optional[str] = None
    ) -> OffRampUrlResponse:
        ...

    def get_on_ramp_config(self) -> RampConfigResponse:
        ...

    def get_off_ramp_config(self) -> RampConfigResponse:
        ...
