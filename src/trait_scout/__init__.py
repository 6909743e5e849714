"""
Trait Scout - NFT ownership discovery, trait statistics and claim registry checks
"""

__version__ = "1.0.0"

from .scout import TraitScout
from .session import WalletSession
from .models import (
    TokenRecord,
    ScanResult,
    ScanStatus,
    ClaimStats,
    TraitSummary,
    CollectionReport,
    EnumerationStrategy,
)
from .exceptions import TraitScoutError, NotConnectedError, ScanError, RegistrationError

__all__ = [
    "TraitScout",
    "WalletSession",
    "TokenRecord",
    "ScanResult",
    "ScanStatus",
    "ClaimStats",
    "TraitSummary",
    "CollectionReport",
    "EnumerationStrategy",
    "TraitScoutError",
    "NotConnectedError",
    "ScanError",
    "RegistrationError",
]
