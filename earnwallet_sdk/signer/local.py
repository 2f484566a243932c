"""
Local private-key signer.
"""
from typing import Union

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..utils import to_bytes


class LocalSigner:
    """Signer backed by an in-memory secp256k1 private key"""

    def __init__(self, private_key: Union[str, bytes]):
        self._account: LocalAccount = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_hash(self, message_hash: Union[bytes, str]) -> bytes:
        """
        Sign a raw 32-byte hash.

        Args:
            message_hash: Hash as bytes or 0x-prefixed hex

        Returns:
            65-byte signature (r || s || v)
        """
        digest = to_bytes(message_hash)
        if len(digest) != 32:
            raise ValueError(f"Expected a 32-byte hash, got {len(digest)} bytes")
        signed = self._account.unsafe_sign_hash(digest)
        return bytes(signed.signature)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address})"
