"""Ownership discovery across a collection's token ID space"""

from typing import Any, List, Optional
from loguru import logger

from .enumerator import BoundedIdEnumerator
from .metadata import MetadataResolver
from .models import EnumerationStrategy, ScanResult, TokenRecord
from .prober import OwnershipProber
from .utils import validate_ethereum_address


class CollectionScanner:
    """
    Finds every token of a collection held by one wallet

    Each token ID is one work unit: probe ownership, then resolve metadata
    if owned. Units run concurrently through the enumerator and the result
    is only built once all of them have settled.
    """

    def __init__(
        self,
        resolver: MetadataResolver,
        prober: Optional[OwnershipProber] = None,
        enumerator: Optional[BoundedIdEnumerator] = None,
        strategy: EnumerationStrategy = EnumerationStrategy.RANGE,
    ):
        self.resolver = resolver
        self.prober = prober or OwnershipProber()
        self.enumerator = enumerator or BoundedIdEnumerator()
        self.strategy = strategy

    async def scan(self, target_address: Optional[str], contract: Any, max_token_id: int) -> ScanResult:
        """Scan [0, max_token_id) for tokens owned by target_address"""
        if not target_address:
            logger.warning("No wallet connected, skipping scan")
            return ScanResult.not_connected()

        if max_token_id < 0:
            raise ValueError("max_token_id must be >= 0")

        logger.info(
            f"Scanning {max_token_id} token IDs for {target_address} "
            f"({self.strategy.value} strategy)"
        )

        if self.strategy == EnumerationStrategy.INDEX:
            records = await self._scan_by_index(target_address, contract, max_token_id)
        else:
            records = await self._scan_range(target_address, contract, max_token_id)

        logger.info(f"Found {len(records)} owned tokens for {target_address}")
        return ScanResult(address=target_address, tokens=records)

    async def _build_record(self, token_id: int) -> TokenRecord:
        metadata = await self.resolver.resolve_metadata(token_id)
        return TokenRecord(token_id=token_id, image_url=metadata.image_url, trait=metadata.trait)

    async def _scan_range(self, target_address: str, contract: Any, max_token_id: int) -> List[TokenRecord]:
        async def probe_and_resolve(token_id: int) -> Optional[TokenRecord]:
            owned = await self.prober.probe(token_id, target_address, contract)
            if owned is None:
                return None
            return await self._build_record(token_id)

        return await self.enumerator.run(range(max_token_id), probe_and_resolve)

    async def _scan_by_index(self, target_address: str, contract: Any, max_token_id: int) -> List[TokenRecord]:
        _, checksum = validate_ethereum_address(target_address)
        owner = checksum or target_address

        # balanceOf failing means the contract is unusable, let it propagate
        balance = int(await contract.functions.balanceOf(owner).call())
        logger.debug(f"balanceOf({owner}) = {balance}")

        async def token_at(index: int) -> Optional[int]:
            try:
                token_id = int(await contract.functions.tokenOfOwnerByIndex(owner, index).call())
            except Exception as e:
                logger.debug(f"tokenOfOwnerByIndex({owner}, {index}) failed: {e}")
                return None
            if not 0 <= token_id < max_token_id:
                logger.warning(f"Token {token_id} is outside [0, {max_token_id}), skipping")
                return None
            return token_id

        token_ids = sorted(set(await self.enumerator.run(range(balance), token_at)))
        return await self.enumerator.run(token_ids, self._build_record)
