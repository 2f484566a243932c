"""
Wallet providers: create and look up smart wallets and their embedded signers.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..exceptions import InvalidArgumentError, WalletNotFoundError
from ..models import Owner
from ..protocols.base import VaultProtocol
from ..signer import Signer
from .embedded import EmbeddedWallet, EmbeddedWalletProvider
from .smart_wallet import SmartWallet


@dataclass
class AccountResult:
    embedded_wallet_id: str
    smart_wallet: SmartWallet


class SmartWalletProvider:
    """Builds SmartWallet handles bound to the session's registry and protocol"""

    def __init__(
        self,
        registry,
        protocol: Optional[VaultProtocol] = None,
        ramp=None,
        logger: Optional[logging.Logger] = None
    ):
        self.registry = registry
        self.protocol = protocol
        self.ramp = ramp
        self.logger = logger or logging.getLogger(__name__)

    def create_wallet(
        self,
        owners: Sequence[Owner],
        signer: Signer,
        salt: int = 0,
        signer_owner_index: int = 0
    ) -> SmartWallet:
        return SmartWallet(
            owners,
            signer,
            self.registry,
            protocol=self.protocol,
            ramp=self.ramp,
            signer_owner_index=signer_owner_index,
            salt=salt,
            logger=self.logger,
        )

    def get_wallet_address(self, owners: Sequence[Owner], salt: int = 0) -> str:
        """Counterfactual address of the wallet for owners and salt"""
        wallet = SmartWallet(owners, None, self.registry, salt=salt, logger=self.logger)
        return wallet.get_address()

    def get_wallet(
        self,
        wallet_address: str,
        signer: Signer,
        owner_index: int = 0,
        owners: Optional[Sequence[Owner]] = None,
        salt: int = 0
    ) -> SmartWallet:
        """
        Handle for a wallet whose address is already known.

        Without owners only the signer is listed, which is enough once the
        wallet is deployed.
        """
        return SmartWallet(
            list(owners) if owners else [signer.address],
            signer,
            self.registry,
            protocol=self.protocol,
            ramp=self.ramp,
            deployment_address=wallet_address,
            signer_owner_index=owner_index,
            salt=salt,
            logger=self.logger,
        )


class WalletProvider:
    """
    Entry point for wallet management.

    Combines an embedded wallet provider (signers) with a smart wallet
    provider (accounts).
    """

    def __init__(
        self,
        embedded_wallet_provider: EmbeddedWalletProvider,
        smart_wallet_provider: SmartWalletProvider,
        logger: Optional[logging.Logger] = None
    ):
        self.embedded_wallet_provider = embedded_wallet_provider
        self.smart_wallet_provider = smart_wallet_provider
        self.logger = logger or logging.getLogger(__name__)

    def create_embedded_wallet(self) -> EmbeddedWallet:
        return self.embedded_wallet_provider.create_wallet()

    def create_smart_wallet(self, owners: Sequence[Owner], signer: Signer, salt: int = 0) -> SmartWallet:
        return self.smart_wallet_provider.create_wallet(owners, signer, salt=salt)

    def create_account(
        self,
        owners: Optional[Sequence[Owner]] = None,
        embedded_wallet_index: Optional[int] = None,
        salt: int = 0
    ) -> AccountResult:
        """
        Create an embedded wallet and a smart wallet it signs for.

        Args:
            owners: Additional owners; the embedded wallet address is inserted
                    into a copy of this list
            embedded_wallet_index: Insert position (defaults to the end)
            salt: Salt for address derivation

        Returns:
            The embedded wallet ID and the smart wallet

        Raises:
            InvalidArgumentError: If embedded_wallet_index is outside 0..len(owners)
        """
        all_owners: List[Owner] = list(owners) if owners else []
        index = len(all_owners) if embedded_wallet_index is None else embedded_wallet_index
        if not 0 <= index <= len(all_owners):
            raise InvalidArgumentError(
                f"Embedded wallet index {index} out of range for {len(all_owners)} owners"
            )

        embedded = self.embedded_wallet_provider.create_wallet()
        if not embedded.wallet_id:
            raise WalletNotFoundError("Failed to create embedded wallet. No wallet ID returned")

        all_owners.insert(index, embedded.address)

        smart_wallet = self.smart_wallet_provider.create_wallet(
            all_owners,
            embedded.account(),
            salt=salt,
            signer_owner_index=index,
        )
        return AccountResult(embedded_wallet_id=embedded.wallet_id, smart_wallet=smart_wallet)

    def get_embedded_wallet(self, wallet_id: str) -> Optional[EmbeddedWallet]:
        return self.embedded_wallet_provider.get_wallet(wallet_id)

    def get_account(
        self,
        wallet_id: str,
        deployment_owners: Optional[Sequence[Owner]] = None,
        signer_owner_index: Optional[int] = None,
        wallet_address: Optional[str] = None,
        salt: int = 0
    ) -> SmartWallet:
        """
        Smart wallet signed by a stored embedded wallet.

        Without a wallet address or deployment owners the embedded wallet is
        assumed to be the only owner.

        Raises:
            WalletNotFoundError: If the embedded wallet does not exist
        """
        embedded = self.embedded_wallet_provider.get_wallet(wallet_id)
        if embedded is None:
            raise WalletNotFoundError(f"Embedded wallet not found: {wallet_id}")

        if deployment_owners is None and wallet_address is None:
            deployment_owners = [embedded.address]

        return self.get_smart_wallet(
            embedded.account(),
            deployment_owners=deployment_owners,
            signer_owner_index=signer_owner_index,
            wallet_address=wallet_address,
            salt=salt,
        )

    def get_smart_wallet(
        self,
        signer: Signer,
        deployment_owners: Optional[Sequence[Owner]] = None,
        signer_owner_index: Optional[int] = None,
        wallet_address: Optional[str] = None,
        salt: int = 0
    ) -> SmartWallet:
        """
        Smart wallet for a signer, located by address or by its deployment owners.

        Raises:
            InvalidArgumentError: If neither wallet_address nor deployment_owners is given
        """
        if not wallet_address and not deployment_owners:
            raise InvalidArgumentError(
                "Either wallet_address or deployment_owners must be provided to locate the smart wallet"
            )

        address = wallet_address or self.smart_wallet_provider.get_wallet_address(deployment_owners, salt=salt)
        return self.smart_wallet_provider.get_wallet(
            address,
            signer,
            owner_index=signer_owner_index or 0,
            owners=deployment_owners,
            salt=salt,
        )
