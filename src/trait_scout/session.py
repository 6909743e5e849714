"""Wallet session context passed into the pipeline"""

from dataclasses import dataclass, field
from typing import Optional

from .utils import validate_ethereum_address


@dataclass(frozen=True)
class WalletSession:
    """
    A connected wallet: the account in use and the chain it is on

    Established on connect and replaced (never mutated) when the wallet
    reports an account or chain change.
    """
    address: str
    chain_id: Optional[int] = None
    private_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def connect(
        cls,
        address: str,
        chain_id: Optional[int] = None,
        private_key: Optional[str] = None,
    ) -> "WalletSession":
        """Validate the address and open a session for it"""
        is_valid, checksum = validate_ethereum_address(address)
        if not is_valid:
            raise ValueError(f"Invalid wallet address: {address}")
        return cls(address=checksum, chain_id=chain_id, private_key=private_key)

    def on_chain(self, chain_id: Optional[int]) -> "WalletSession":
        """Same account on another chain"""
        return WalletSession(address=self.address, chain_id=chain_id, private_key=self.private_key)
