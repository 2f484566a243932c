"""
RelayClient - JSON-RPC client for an ERC-4337 bundler.
"""
import itertools
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..exceptions import RelayError, RelayTimeoutError
from ..models import TransactionIntent, UserOperationGas, UserOperationReceipt
from .account import SmartAccount, to_rpc_user_operation

logger = logging.getLogger(__name__)


class RelayClient:
    """
    Bundler client bound to one smart account.

    Requests are not retried: a user operation that failed to submit must be
    rebuilt by the caller with a fresh nonce.
    """

    def __init__(
        self,
        relay_url: str,
        account: SmartAccount,
        timeout: int = 30,
        receipt_timeout: float = 120.0,
        poll_interval: float = 1.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.relay_url = relay_url
        self.account = account
        self.timeout = timeout
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)
        self._ids = itertools.count(1)

    @property
    def entry_point(self) -> str:
        return self.account.entry_point

    def _request(self, method: str, params: List[Any]) -> Any:
        """
        Send a JSON-RPC request to the bundler.

        Raises:
            RelayError: On transport failure, a non-JSON body or a JSON-RPC error
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        self.logger.debug(f"Relay request {method}")
        try:
            response = self.session.post(self.relay_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RelayError(f"Relay request {method} failed: {e}") from e
        try:
            body = response.json()
        except ValueError as e:
            raise RelayError(f"Invalid JSON from relay (HTTP {response.status_code})") from e
        if not isinstance(body, dict):
            raise RelayError(f"Unexpected relay response for {method}")

        if body.get("error"):
            error = body["error"]
            raise RelayError(
                error.get("message", "Unknown relay error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        if response.status_code >= 400:
            raise RelayError(f"Relay returned HTTP {response.status_code}")
        return body.get("result")

    def estimate_user_operation_gas(self, intents: Sequence[TransactionIntent]) -> UserOperationGas:
        """Estimate call, verification and pre-verification gas for the calls"""
        user_op = self.account.build_user_operation(intents)
        result = self._request(
            "eth_estimateUserOperationGas",
            [to_rpc_user_operation(user_op), self.entry_point],
        )
        gas = UserOperationGas.model_validate(result)
        self.logger.debug(
            f"Estimated gas: call={gas.call_gas_limit} verification={gas.verification_gas_limit} "
            f"preVerification={gas.pre_verification_gas}"
        )
        return gas

    def send_user_operation(self, intents: Sequence[TransactionIntent], gas: UserOperationGas) -> str:
        """
        Build, sign and submit a user operation.

        Returns:
            User operation hash
        """
        user_op = self.account.build_user_operation(intents, gas=gas)
        user_op["signature"] = self.account.sign_user_operation(user_op)
        user_op_hash = self._request(
            "eth_sendUserOperation",
            [to_rpc_user_operation(user_op), self.entry_point],
        )
        self.logger.info(f"User operation submitted: {user_op_hash}")
        return user_op_hash

    def get_user_operation_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        """Get the receipt of an included operation, or None while it is pending"""
        result = self._request("eth_getUserOperationReceipt", [user_op_hash])
        if not result:
            return None
        return UserOperationReceipt.from_rpc(result)

    def wait_for_user_operation_receipt(
        self,
        user_op_hash: str,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None
    ) -> UserOperationReceipt:
        """
        Block until the operation is included on-chain.

        Raises:
            RelayTimeoutError: If no receipt arrives within the timeout
        """
        timeout = self.receipt_timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        deadline = time.monotonic() + timeout

        while True:
            receipt = self.get_user_operation_receipt(user_op_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise RelayTimeoutError(
                    f"Timed out after {timeout}s waiting for user operation {user_op_hash}"
                )
            time.sleep(poll_interval)
