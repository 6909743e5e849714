"""
Configuration management for Trait Scout
"""

import os
from typing import List, Optional
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

from .models import EnumerationStrategy

# Load environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)

DEFAULT_REQUIRED_TRAITS = ["Pirate Ship", "Tavern", "Island", "Treasure Chest", "Market"]


@dataclass
class CollectionConfig:
    """Everything the pipeline needs to know about one collection"""
    collection_address: str
    registry_address: Optional[str]
    metadata_base_url: str
    max_token_id: int
    enumeration: EnumerationStrategy = EnumerationStrategy.RANGE
    trait_type: str = "Background"
    required_traits: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_TRAITS))
    image_url_template: Optional[str] = None


@dataclass
class Config:
    """Main configuration class"""

    # Chain
    rpc_url: str = "https://mainnet.base.org"
    chain_id: Optional[int] = 8453

    # Contracts
    collection_address: str = "0x605923BE39B14AEA67F0087652a2b4bd64c18Bb8"
    registry_address: Optional[str] = "0x806d861aFE5d2E4B3f6Eb07A4626E4a7621B90b3"

    # Metadata
    metadata_base_url: str = (
        "https://raw.githubusercontent.com/ArielRin/Pigz-and-Robbers-Pirate-Pigz-Application"
        "/fixfoot/public/137nftdataV2/Metadata/"
    )
    image_url_template: Optional[str] = None
    ipfs_gateway: str = "https://ipfs.io/ipfs/"
    placeholder_image: str = "https://via.placeholder.com/150"

    # Collection shape
    max_token_id: int = 3333
    enumeration: EnumerationStrategy = EnumerationStrategy.RANGE
    trait_type: str = "Background"
    required_traits: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_TRAITS))

    # Request settings
    max_workers: int = 50  # concurrent ownership probes, 0 = unbounded
    timeout: int = 30
    cache_ttl: int = 900  # 15 minutes

    # Signing
    private_key: Optional[str] = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables"""

        def get_list(key_name: str, default: List[str]) -> List[str]:
            """Get a comma-separated list"""
            value = os.getenv(key_name, "")
            if not value:
                return list(default)
            return [v.strip() for v in value.split(",") if v.strip()]

        chain_id = os.getenv("CHAIN_ID", "8453")

        return cls(
            rpc_url=os.getenv("RPC_URL", "https://mainnet.base.org"),
            chain_id=int(chain_id) if chain_id else None,
            collection_address=os.getenv("COLLECTION_ADDRESS", cls.collection_address),
            registry_address=os.getenv("REGISTRY_ADDRESS", cls.registry_address) or None,
            metadata_base_url=os.getenv("METADATA_BASE_URL", cls.metadata_base_url),
            image_url_template=os.getenv("IMAGE_URL_TEMPLATE") or None,
            ipfs_gateway=os.getenv("IPFS_GATEWAY", "https://ipfs.io/ipfs/"),
            placeholder_image=os.getenv("PLACEHOLDER_IMAGE", "https://via.placeholder.com/150"),
            max_token_id=int(os.getenv("MAX_TOKEN_ID", "3333")),
            enumeration=EnumerationStrategy.from_string(os.getenv("ENUMERATION", "range")),
            trait_type=os.getenv("TRAIT_TYPE", "Background"),
            required_traits=get_list("REQUIRED_TRAITS", DEFAULT_REQUIRED_TRAITS),
            max_workers=int(os.getenv("MAX_WORKERS", "50")),
            timeout=int(os.getenv("TIMEOUT", "30")),
            cache_ttl=int(os.getenv("CACHE_TTL", "900")),
            private_key=os.getenv("PRIVATE_KEY") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def get_collection_config(self) -> CollectionConfig:
        """Get the collection config"""
        if not self.collection_address:
            raise ValueError("Collection address not configured")
        if self.max_token_id <= 0:
            raise ValueError("MAX_TOKEN_ID must be a positive upper bound")
        return CollectionConfig(
            collection_address=self.collection_address,
            registry_address=self.registry_address,
            metadata_base_url=self.metadata_base_url,
            max_token_id=self.max_token_id,
            enumeration=self.enumeration,
            trait_type=self.trait_type,
            required_traits=list(self.required_traits),
            image_url_template=self.image_url_template,
        )


# Global config instance
config = Config.from_env()
