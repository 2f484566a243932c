"""
CoinbaseRampClient - fiat on/off-ramp through the Coinbase Developer Platform.

Every request carries a short-lived bearer JWT signed with the CDP API key.
Two key formats are accepted: a PEM encoded EC key (signed ES256) and a
base64 encoded Ed25519 key (signed EdDSA).
"""
import base64
import logging
import secrets
import time
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
from urllib.parse import urlparse

import jwt
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import ConfigError, InvalidArgumentError, RampError
from ..models import OffRampUrlResponse, OnRampUrlResponse, RampConfigResponse
from ..utils import check_valid_url, normalize_address

CDP_API_URL = "https://api.cdp.coinbase.com"
CDP_ONRAMP_API_URL = "https://api.developer.coinbase.com"

JWT_EXPIRES_IN = 120

ResponseT = TypeVar("ResponseT", bound=BaseModel)

DEFAULT_PURCHASE_CURRENCY = "USDC"
DEFAULT_PAYMENT_CURRENCY = "USD"
DEFAULT_PAYMENT_METHOD = "CARD"
DEFAULT_CASHOUT_CURRENCY = "USD"
DEFAULT_SELL_CURRENCY = "USDC"

ED25519_KEY_LENGTH = 64


def load_signing_key(api_key_secret: str) -> Tuple[Any, str]:
    """
    Parse a CDP API key secret.

    Args:
        api_key_secret: PEM EC private key, or base64 of a 64-byte Ed25519 key
                        (32-byte seed followed by the public key)

    Returns:
        (private key, JWT algorithm)

    Raises:
        ConfigError: If the secret is in neither format
    """
    # Keys read from env files often carry literal "\n"
    secret = api_key_secret.strip().replace("\\n", "\n")

    if secret.startswith("-----BEGIN"):
        try:
            key = serialization.load_pem_private_key(secret.encode(), password=None)
        except ValueError as e:
            raise ConfigError(f"Invalid PEM API key secret: {e}") from e
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise ConfigError("PEM API key secret must be an EC private key")
        return key, "ES256"

    try:
        raw = base64.b64decode(secret, validate=True)
    except ValueError as e:
        raise ConfigError(f"API key secret is neither PEM nor base64: {e}") from e
    if len(raw) != ED25519_KEY_LENGTH:
        raise ConfigError(f"Ed25519 API key secret must decode to {ED25519_KEY_LENGTH} bytes, got {len(raw)}")
    return Ed25519PrivateKey.from_private_bytes(raw[:32]), "EdDSA"


class CoinbaseRampClient:
    """
    Ramp provider backed by the Coinbase onramp and offramp APIs.

    On-ramp sessions use the v2 platform API; off-ramp quotes and the
    buy/sell configuration use the v1 onramp API.
    """

    def __init__(
        self,
        api_key_id: Optional[str],
        api_key_secret: Optional[str],
        integrator_id: Optional[str],
        registry,
        api_url: str = CDP_API_URL,
        onramp_api_url: str = CDP_ONRAMP_API_URL,
        retry_count: int = 3,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            api_key_id: CDP API key ID
            api_key_secret: CDP API key secret
            integrator_id: Partner user ID sent with off-ramp quotes
            registry: NetworkRegistry used to name the destination network
            api_url: Base URL of the v2 platform API
            onramp_api_url: Base URL of the v1 onramp API
            retry_count: Retries on 429/5xx responses
            timeout: Request timeout in seconds
            logger: Optional logger

        Raises:
            ConfigError: If any credential is missing or the secret is malformed
        """
        if not api_key_id or not api_key_secret or not integrator_id:
            raise ConfigError("API key ID, secret and integrator ID are required")

        self.api_key_id = api_key_id
        self.integrator_id = integrator_id
        self.registry = registry
        self.api_url = api_url.rstrip('/')
        self.onramp_api_url = onramp_api_url.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._signing_key, self._algorithm = load_signing_key(api_key_secret)

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def generate_jwt(self, method: str, url: str) -> str:
        """Bearer token scoped to a single method and URL"""
        parsed = urlparse(url)
        now = int(time.time())
        claims = {
            "sub": self.api_key_id,
            "iss": "cdp",
            "nbf": now,
            "exp": now + JWT_EXPIRES_IN,
            "uris": [f"{method.upper()} {parsed.netloc}{parsed.path}"],
        }
        headers = {
            "kid": self.api_key_id,
            "typ": "JWT",
            "nonce": secrets.token_hex(16),
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm, headers=headers)

    def _request(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.generate_jwt(method, url)}",
            "Content-Type": "application/json",
        }
        try:
            response = self.session.request(method, url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise RampError(f"Request to {url} failed: {e}") from e

        if response.status_code not in (200, 201):
            try:
                error = response.json()
            except ValueError:
                error = {}
            if not isinstance(error, dict):
                error = {}
            message = error.get("errorMessage") or error.get("message") or response.text or "Unknown error"
            self.logger.error(f"Ramp request {method} {url} failed with status {response.status_code}: {message}")
            raise RampError(
                message,
                error_type=error.get("errorType"),
                correlation_id=error.get("correlationId"),
                error_link=error.get("errorLink"),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RampError(f"Invalid JSON from {url}: {e}", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise RampError(f"Unexpected response from {url}", status_code=response.status_code)
        return data

    @staticmethod
    def _build(model: Type[ResponseT], what: str, **fields: Any) -> ResponseT:
        try:
            return model.model_validate(fields)
        except ValidationError as e:
            raise RampError(f"Malformed {what} response: {e}") from e

    def _network_name(self) -> str:
        chain_id = self.registry.get_supported_chain()
        return self.registry.get_chain(chain_id).name.lower()

    @staticmethod
    def _check_redirect_url(redirect_url: str) -> None:
        if not check_valid_url(redirect_url):
            raise InvalidArgumentError("Redirect URL is not a valid URL")

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
        """
        Create an on-ramp session that delivers crypto to address.

        Args:
            address: Destination wallet address
            redirect_url: Where the user returns after checkout
            amount: Fiat amount to pay
            purchase_currency: Asset to buy (default USDC)
            payment_currency: Fiat currency (default USD)
            payment_method: Payment method (default CARD)
            country: ISO country code of the user

        Returns:
            Session URL and quote

        Raises:
            InvalidArgumentError: If redirect_url is not a valid URL
            RampError: If the provider rejects the request
        """
        self._check_redirect_url(redirect_url)

        body = {
            "destinationAddress": normalize_address(address),
            "destinationNetwork": self._network_name(),
            "redirectUrl": redirect_url,
            "paymentAmount": amount,
            "purchaseCurrency": purchase_currency or DEFAULT_PURCHASE_CURRENCY,
            "paymentCurrency": payment_currency or DEFAULT_PAYMENT_CURRENCY,
            "paymentMethod": payment_method or DEFAULT_PAYMENT_METHOD,
        }
        if country:
            body["country"] = country

        data = self._request("POST", f"{self.api_url}/platform/v2/onramp/sessions", body)
        session = data.get("session")
        url = session.get("onrampUrl") if isinstance(session, dict) else None
        if not url:
            raise RampError("On-ramp response did not include a session URL")
        self.logger.debug(f"Created on-ramp session for {body['destinationAddress']}")
        return self._build(OnRampUrlResponse, "on-ramp", url=url, quote=data.get("quote"))

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
        """
        Request a sell quote and the off-ramp URL that executes it.

        Raises:
            InvalidArgumentError: If redirect_url is not a valid URL
            RampError: If the provider rejects the request
        """
        self._check_redirect_url(redirect_url)

        body = {
            "sourceAddress": normalize_address(address),
            "country": country,
            "paymentMethod": payment_method,
            "partnerUserId": self.integrator_id,
            "redirectUrl": redirect_url,
            "sellAmount": sell_amount,
            "sellNetwork": self._network_name(),
            "cashoutCurrency": cashout_currency or DEFAULT_CASHOUT_CURRENCY,
            "sellCurrency": sell_currency or DEFAULT_SELL_CURRENCY,
        }

        data = self._request("POST", f"{self.onramp_api_url}/onramp/v1/sell/quote", body)
        if not data.get("offramp_url"):
            raise RampError("Off-ramp response did not include a URL")
        return self._build(
            OffRampUrlResponse,
            "off-ramp",
            url=data["offramp_url"],
            quote_id=data.get("quote_id"),
            cashout_total=data.get("cashout_total"),
            cashout_subtotal=data.get("cashout_subtotal"),
            sell_amount=data.get("sell_amount"),
            coinbase_fee=data.get("coinbase_fee"),
        )

    def get_on_ramp_config(self) -> RampConfigResponse:
        """Countries and payment methods available for buying"""
        data = self._request("GET", f"{self.onramp_api_url}/onramp/v1/buy/config")
        return self._build(RampConfigResponse, "buy config", **data)

    def get_off_ramp_config(self) -> RampConfigResponse:
        """Countries and payment methods available for selling"""
        data = self._request("GET", f"{self.onramp_api_url}/onramp/v1/sell/config")
        return self._build(RampConfigResponse, "sell config", **data)
