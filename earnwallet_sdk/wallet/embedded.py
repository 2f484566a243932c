"""
Embedded wallets: SDK-managed EOA keys used as smart wallet owners.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol

from eth_account import Account

from ..keystore import KeyStore, decrypt_key_data, encrypt_key_data
from ..signer import LocalSigner, Signer


@dataclass
class EmbeddedWallet:
    """An embedded EOA; account() returns a signer usable as an owner"""
    wallet_id: str
    address: str
    _signer: Signer = field(repr=False)

    def account(self) -> Signer:
        return self._signer


class EmbeddedWalletProvider(Protocol):
    """Source of embedded wallets"""

    def create_wallet(self) -> EmbeddedWallet:
        ...

    def get_wallet(self, wallet_id: str) -> Optional[EmbeddedWallet]:
        ...


class KeyStoreEmbeddedWalletProvider:
    """
    Embedded wallets whose keys are generated locally and stored encrypted
    in a KeyStore.
    """

    SECTION = "embedded_wallets"

    def __init__(self, store: Optional[KeyStore] = None, logger: Optional[logging.Logger] = None):
        self.store = store or KeyStore()
        self.logger = logger or logging.getLogger(__name__)

    def create_wallet(self) -> EmbeddedWallet:
        """Generate a new secp256k1 key and persist it encrypted"""
        account = Account.create()
        wallet_id = str(uuid.uuid4())
        self.store.put(self.SECTION, wallet_id, {
            "wallet_id": wallet_id,
            "address": account.address,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "key": encrypt_key_data({"private_key": account.key.hex()}),
        })
        # Log only a prefix of the address
        self.logger.info(f"Created embedded wallet {wallet_id} ({account.address[:10]}…)")
        return EmbeddedWallet(wallet_id=wallet_id, address=account.address, _signer=LocalSigner(account.key))

    def get_wallet(self, wallet_id: str) -> Optional[EmbeddedWallet]:
        """Load a wallet by ID, or None if it does not exist"""
        entry = self.store.get(self.SECTION, wallet_id)
        if entry is None:
            return None
        private_key = decrypt_key_data(entry["key"])["private_key"]
        signer = LocalSigner(private_key)
        return EmbeddedWallet(wallet_id=wallet_id, address=signer.address, _signer=signer)
