"""
User directory: maps application user IDs to their wallets.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from .keystore import KeyStore
from .utils import normalize_address


class DirectoryEntry(BaseModel):
    """Wallet record of one application user"""
    user_id: str
    wallet_id: str
    wallet_address: str
    created_at: str


class WalletDirectory:
    """Key-value lookup of user -> wallet, stored in a KeyStore section"""

    SECTION = "users"

    def __init__(self, store: Optional[KeyStore] = None, logger: Optional[logging.Logger] = None):
        self.store = store or KeyStore()
        self.logger = logger or logging.getLogger(__name__)

    def lookup(self, user_id: str) -> Optional[DirectoryEntry]:
        entry = self.store.get(self.SECTION, user_id)
        return DirectoryEntry.model_validate(entry) if entry else None

    def persist(self, user_id: str, wallet_id: str, wallet_address: str) -> DirectoryEntry:
        """
        Save a user's wallet, replacing any previous record.

        Args:
            user_id: Application user identifier
            wallet_id: Embedded wallet ID
            wallet_address: Smart wallet address

        Returns:
            The stored record
        """
        entry = DirectoryEntry(
            user_id=user_id,
            wallet_id=wallet_id,
            wallet_address=normalize_address(wallet_address),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self.store.put(self.SECTION, user_id, entry.model_dump())
        self.logger.debug(f"Stored wallet {wallet_id} for user {user_id}")
        return entry

    def remove(self, user_id: str) -> bool:
        return self.store.delete(self.SECTION, user_id)
