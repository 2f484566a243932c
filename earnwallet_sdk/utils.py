"""
Utility functions for the EarnWallet SDK.
"""
import re
from decimal import Decimal, InvalidOperation, Overflow, ROUND_DOWN, localcontext
from typing import Any, Sequence, Union

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address, is_address

from .exceptions import InvalidArgumentError

# scheme://host[:port][/path], nothing fancier
_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s/:]*(:\d+)?(/[^\s]*)?$", re.IGNORECASE)

GAS_BUFFER_PERCENT = 40

UINT256_MAX = 2 ** 256 - 1


def check_valid_url(url: Any) -> bool:
    """
    Check that a value looks like an HTTP(S) URL.

    This is a simple scheme+host check, not a full RFC 3986 validator.

    Args:
        url: Value to check

    Returns:
        True if the value is a string with an http/https scheme and a host
    """
    if not isinstance(url, str) or not url:
        return False
    return bool(_URL_PATTERN.match(url))


def parse_units(value: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human-readable decimal amount to base units.

    Digits beyond the token's precision are truncated.

    Args:
        value: Decimal amount such as "100" or "0.5"
        decimals: Number of decimals of the token

    Returns:
        Integer amount in base units

    Raises:
        InvalidArgumentError: If the value is not a finite decimal number or
                              does not fit in a uint256
    """
    if decimals < 0:
        raise InvalidArgumentError(f"decimals must be non-negative, got {decimals}")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidArgumentError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidArgumentError(f"Invalid amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        try:
            scaled = amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN)
        except Overflow as e:
            raise InvalidArgumentError(f"Amount {value!r} exceeds the uint256 range") from e
        if abs(scaled) > UINT256_MAX:
            raise InvalidArgumentError(f"Amount {value!r} exceeds the uint256 range")
        return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """
    Convert a base-unit integer to a decimal string.

    Trailing zeros of the fractional part are removed, so 100000000 at
    6 decimals formats as "100".

    Args:
        value: Amount in base units
        decimals: Number of decimals of the token

    Returns:
        Decimal string
    """
    value = int(value)
    negative = value < 0
    digits = str(abs(value)).rjust(decimals + 1, "0") if decimals else str(abs(value))

    if decimals:
        integer, fraction = digits[:-decimals], digits[-decimals:].rstrip("0")
    else:
        integer, fraction = digits, ""

    result = f"{integer}.{fraction}" if fraction else integer
    return f"-{result}" if negative else result


def bump_gas(value: int, percent: int = GAS_BUFFER_PERCENT) -> int:
    """
    Add a percentage safety margin to a gas value, rounding down.

    Args:
        value: Gas estimate
        percent: Margin in percent

    Returns:
        value + floor(value * percent / 100)
    """
    value = int(value)
    return value + value * percent // 100


def normalize_address(address: str) -> str:
    """
    Return the checksummed form of an address.

    Raises:
        InvalidArgumentError: If the value is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address.lower()):
        raise InvalidArgumentError(f"Invalid address: {address!r}")
    return to_checksum_address(address.lower())


def to_bytes(value: Union[str, bytes]) -> bytes:
    """Decode a 0x-prefixed hex string, passing bytes through."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    hex_str = value[2:] if value.startswith("0x") else value
    try:
        return bytes.fromhex(hex_str)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid hex string: {value!r}") from e


def to_hex(value: Union[bytes, int]) -> str:
    """Encode bytes or an integer as a 0x-prefixed hex string."""
    if isinstance(value, int):
        return hex(value)
    return "0x" + bytes(value).hex()


def encode_function_call(name: str, types: Sequence[str], args: Sequence[Any]) -> str:
    """
    ABI-encode a contract call.

    Args:
        name: Function name, e.g. "approve"
        types: ABI parameter types, e.g. ["address", "uint256"]
        args: Argument values in the same order as types

    Returns:
        0x-prefixed calldata (4-byte selector followed by encoded arguments)
    """
    signature = f"{name}({','.join(types)})"
    selector = function_signature_to_4byte_selector(signature)
    return to_hex(selector + encode(list(types), list(args)))
