"""Off-chain token metadata resolution"""

import asyncio
from typing import Any, Dict, Optional
import aiohttp
from loguru import logger

from .config import CollectionConfig, Config
from .models import TokenMetadata, UNKNOWN_TRAIT
from .storage import StorageAdapter
from .utils import convert_ipfs_to_http


class MetadataResolver:
    """
    Fetches per-token metadata documents and turns them into an image URL and trait

    The resolver is total: every failure (network error, timeout, non-200
    status, malformed JSON, missing image field) resolves to the placeholder
    image and the "Unknown" trait instead of raising.
    """

    def __init__(
        self,
        collection: CollectionConfig,
        config: Config,
        session: Optional[aiohttp.ClientSession] = None,
        storage: Optional[StorageAdapter] = None,
    ):
        self.collection = collection
        self.base_url = collection.metadata_base_url
        self.gateway = config.ipfs_gateway
        self.placeholder_image = config.placeholder_image
        self.timeout = config.timeout
        self.storage = storage
        self._session = session
        self._owns_session = session is None

    def metadata_url(self, token_id: int) -> str:
        return f"{self.base_url}{token_id}.json"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self):
        """Close the HTTP session if this resolver opened it"""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "MetadataResolver":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def fetch_document(self, token_id: int) -> Optional[Dict[str, Any]]:
        """Fetch the raw metadata document, None on any failure"""
        url = self.metadata_url(token_id)

        if self.storage is not None:
            cached = await self.storage.get_cache(url)
            if cached is not None:
                logger.debug(f"Cache hit for {url}")
                return cached

        try:
            async with self._get_session().get(url) as response:
                if not 200 <= response.status < 300:
                    logger.warning(f"Metadata for token {token_id} returned HTTP {response.status}")
                    return None
                # Static hosts often serve JSON as text/plain
                document = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Metadata request for token {token_id} failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Metadata for token {token_id} is not valid JSON: {e}")
            return None

        if not isinstance(document, dict):
            logger.warning(f"Metadata for token {token_id} is not a JSON object")
            return None

        if self.storage is not None:
            await self.storage.set_cache(url, document)
        return document

    def _image_from_document(self, token_id: int, document: Optional[Dict[str, Any]]) -> str:
        if self.collection.image_url_template:
            return self.collection.image_url_template.format(token_id=token_id)
        if document is None:
            return self.placeholder_image
        image = document.get("image")
        if not isinstance(image, str) or not image.strip():
            logger.warning(f"Metadata for token {token_id} has no usable image field")
            return self.placeholder_image
        return convert_ipfs_to_http(image.strip(), self.gateway)

    def _trait_from_document(self, document: Optional[Dict[str, Any]]) -> str:
        if document is None:
            return UNKNOWN_TRAIT
        attributes = document.get("attributes")
        if not isinstance(attributes, list):
            return UNKNOWN_TRAIT
        for attr in attributes:
            if isinstance(attr, dict) and attr.get("trait_type") == self.collection.trait_type:
                value = attr.get("value")
                if value is None or value == "":
                    return UNKNOWN_TRAIT
                return str(value)
        return UNKNOWN_TRAIT

    async def resolve_metadata(self, token_id: int) -> TokenMetadata:
        """Resolve image URL and trait for one token"""
        try:
            document = await self.fetch_document(token_id)
            return TokenMetadata(
                image_url=self._image_from_document(token_id, document),
                trait=self._trait_from_document(document),
            )
        except Exception as e:
            logger.error(f"Unexpected error resolving metadata for token {token_id}: {e}")
            return TokenMetadata(image_url=self.placeholder_image, trait=UNKNOWN_TRAIT)

    async def resolve(self, token_id: int) -> str:
        """Resolve the image URL for one token, never empty"""
        metadata = await self.resolve_metadata(token_id)
        return metadata.image_url
