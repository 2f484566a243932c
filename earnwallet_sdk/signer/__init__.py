"""
Signer interface for smart wallet owners.
"""
from typing import Protocol, Union, runtime_checkable


@runtime_checkable
class Signer(Protocol):
    """Protocol for accounts that can sign user operation hashes"""
    address: str

    def sign_hash(self, message_hash: Union[bytes, str]) -> bytes:
        """Sign a 32-byte hash without any message prefix, returning r || s || v"""
        ...


from .local import LocalSigner  # noqa: E402

__all__ = ["Signer", "LocalSigner"]
