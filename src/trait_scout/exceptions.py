"""Errors surfaced to callers of the scan pipeline"""

from typing import Optional


class TraitScoutError(Exception):
    """Base class for all Trait Scout errors"""


class NotConnectedError(TraitScoutError):
    """Raised when an action needs a wallet session and none is established"""


class ScanError(TraitScoutError):
    """The scan as a whole failed, e.g. the contract handle is unusable"""


class RegistrationError(TraitScoutError):
    """A registerNFT transaction was rejected, reverted or never confirmed"""

    def __init__(self, token_id: int, message: str, tx_hash: Optional[str] = None):
        self.token_id = token_id
        self.tx_hash = tx_hash
        super().__init__(f"Registration of token {token_id} failed: {message}")
