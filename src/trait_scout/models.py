"""
Pydantic models for scan results, claim counters and trait statistics
"""

from enum import Enum
from typing import Optional, List, Dict, Set, Tuple, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_TRAIT = "Unknown"


class EnumerationStrategy(str, Enum):
    """How owned token IDs are discovered for a collection"""
    RANGE = "range"  # ownerOf over [0, max_token_id)
    INDEX = "index"  # balanceOf + tokenOfOwnerByIndex

    @classmethod
    def from_string(cls, value: str) -> "EnumerationStrategy":
        """Convert string to EnumerationStrategy enum"""
        value = (value or "").lower().strip()
        mapping = {
            "range": cls.RANGE,
            "scan": cls.RANGE,
            "index": cls.INDEX,
            "enumerable": cls.INDEX,
        }
        if value not in mapping:
            raise ValueError(f"Unsupported enumeration strategy: {value}")
        return mapping[value]


class ScanStatus(str, Enum):
    """Outcome of a scan request"""
    COMPLETE = "complete"
    NOT_CONNECTED = "not_connected"
    WRONG_NETWORK = "wrong_network"


class TokenMetadata(BaseModel):
    """Resolved off-chain metadata for one token"""
    image_url: str
    trait: str = UNKNOWN_TRAIT


class TokenRecord(BaseModel):
    """One owned token as presented to callers"""

    model_config = ConfigDict(frozen=True)

    token_id: int = Field(ge=0)
    image_url: str
    trait: str = UNKNOWN_TRAIT
    is_registered: bool = False

    @field_validator("trait", mode="before")
    @classmethod
    def default_trait(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNKNOWN_TRAIT
        return value

    def with_registration(self, is_registered: bool = True) -> "TokenRecord":
        """Copy of this record with the registration flag set"""
        return self.model_copy(update={"is_registered": is_registered})


class ScanResult(BaseModel):
    """Complete set of owned tokens produced by one scan"""

    model_config = ConfigDict(frozen=True)

    address: Optional[str] = None
    status: ScanStatus = ScanStatus.COMPLETE
    tokens: Tuple[TokenRecord, ...] = ()
    generation: int = 0

    @field_validator("tokens", mode="before")
    @classmethod
    def sort_unique_tokens(cls, value: Any) -> Any:
        if value is None:
            return ()
        tokens = list(value)
        ids = [t.token_id if isinstance(t, TokenRecord) else t["token_id"] for t in tokens]
        if len(ids) != len(set(ids)):
            raise ValueError("Token IDs in a scan result must be unique")
        return tuple(sorted(tokens, key=lambda t: t.token_id if isinstance(t, TokenRecord) else t["token_id"]))

    @classmethod
    def not_connected(cls) -> "ScanResult":
        """Empty result for a scan requested without a wallet"""
        return cls(status=ScanStatus.NOT_CONNECTED)

    @classmethod
    def wrong_network(cls, address: Optional[str] = None) -> "ScanResult":
        """Empty result for a wallet on an unexpected chain"""
        return cls(address=address, status=ScanStatus.WRONG_NETWORK)

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    def token_ids(self) -> Set[int]:
        return {t.token_id for t in self.tokens}

    def get(self, token_id: int) -> Optional[TokenRecord]:
        for token in self.tokens:
            if token.token_id == token_id:
                return token
        return None

    def replace_tokens(self, tokens: List[TokenRecord]) -> "ScanResult":
        """Copy of this result carrying a new token list"""
        return ScanResult(
            address=self.address,
            status=self.status,
            tokens=tuple(tokens),
            generation=self.generation,
        )

    def mark_registered(self, token_id: int) -> "ScanResult":
        """Copy of this result with exactly one token flagged as registered"""
        if self.get(token_id) is None:
            raise KeyError(f"Token {token_id} is not part of this scan result")
        return self.replace_tokens([
            t.with_registration(True) if t.token_id == token_id else t
            for t in self.tokens
        ])


class ClaimStats(BaseModel):
    """Claim counters read from the registry contract"""
    valid_claims: int = Field(default=0, ge=0)
    collected_claims: int = Field(default=0, ge=0)


class TraitSummary(BaseModel):
    """Trait tally and the required traits still missing"""
    tally: Dict[str, int] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing

    @property
    def total(self) -> int:
        return sum(self.tally.values())


class CollectionReport(BaseModel):
    """Everything the presentation layer shows for one wallet"""
    result: ScanResult
    claims: Optional[ClaimStats] = None
    traits: TraitSummary = Field(default_factory=TraitSummary)

    @property
    def status(self) -> ScanStatus:
        return self.result.status
