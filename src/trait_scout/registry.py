"""Claim registry reads, ownership merge and NFT registration"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Set, Tuple
from loguru import logger

from .exceptions import RegistrationError
from .models import ClaimStats, TokenRecord
from .session import WalletSession
from .utils import normalize_token_id, validate_ethereum_address


def _entry_token_id(entry: Any) -> str:
    """Token ID of one getRegisteredNFTs() entry, whatever shape the decoder gave it"""
    if isinstance(entry, Mapping):
        return normalize_token_id(entry["tokenId"])
    if hasattr(entry, "tokenId"):
        return normalize_token_id(entry.tokenId)
    if isinstance(entry, (list, tuple)):
        return normalize_token_id(entry[0])
    return normalize_token_id(entry)


class RegistryMerger:
    """Cross-references owned tokens with the claim registry contract"""

    def __init__(self, receipt_timeout: int = 120):
        self.receipt_timeout = receipt_timeout

    async def registered_token_ids(self, registry: Any) -> Set[str]:
        """All registered token IDs, read with a single call"""
        entries = await registry.functions.getRegisteredNFTs().call()
        registered: Set[str] = set()
        for entry in entries:
            try:
                registered.add(_entry_token_id(entry))
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.warning(f"Skipping undecodable registry entry {entry!r}: {e}")
        logger.debug(f"Registry holds {len(registered)} registered tokens")
        return registered

    async def claim_stats(self, registry: Any, target_address: str) -> ClaimStats:
        """Eligible and already collected claim counters for an address"""
        valid_claims = await registry.functions.getClaimCountByUser(target_address).call()
        collected_claims = await registry.functions.userClaimCounts(target_address).call()
        return ClaimStats(valid_claims=int(valid_claims), collected_claims=int(collected_claims))

    async def merge(
        self,
        owned_tokens: Iterable[TokenRecord],
        registry: Any,
        target_address: str,
    ) -> Tuple[List[TokenRecord], ClaimStats]:
        """
        Flag each owned token as registered or not and read the claim counters

        The counters come straight from the registry and are not derived
        from the owned tokens, so the two may disagree.
        """
        registered = await self.registered_token_ids(registry)
        enriched = [
            token.with_registration(normalize_token_id(token.token_id) in registered)
            for token in owned_tokens
        ]
        stats = await self.claim_stats(registry, target_address)
        logger.info(
            f"{sum(1 for t in enriched if t.is_registered)}/{len(enriched)} owned tokens registered, "
            f"{stats.valid_claims} valid claims, {stats.collected_claims} collected"
        )
        return enriched, stats

    async def register_nft(
        self,
        w3: Any,
        registry: Any,
        session: WalletSession,
        token_id: int,
        trait: str,
    ) -> Any:
        """
        Submit registerNFT(token_id, trait) and wait for it to be mined

        Signs locally when the session carries a private key, otherwise the
        node or wallet behind the provider signs for session.address.
        Raises RegistrationError if the transaction fails or reverts.
        """
        tx_hash = None
        try:
            call = registry.functions.registerNFT(token_id, trait)
            if session.private_key:
                account = w3.eth.account.from_key(session.private_key)
                _, sender = validate_ethereum_address(session.address)
                if sender != account.address:
                    raise RegistrationError(token_id, "private key does not belong to the connected address")
                tx = await call.build_transaction({
                    "from": account.address,
                    "nonce": await w3.eth.get_transaction_count(account.address),
                })
                signed = account.sign_transaction(tx)
                tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = await call.transact({"from": session.address})

            logger.info(f"registerNFT({token_id}, {trait!r}) submitted: {tx_hash.hex()}")
            receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except RegistrationError:
            raise
        except Exception as e:
            logger.error(f"Error registering token {token_id}: {e}")
            raise RegistrationError(token_id, str(e), tx_hash.hex() if tx_hash else None) from e

        if receipt["status"] != 1:
            logger.error(f"registerNFT({token_id}) reverted in tx {tx_hash.hex()}")
            raise RegistrationError(token_id, "transaction reverted", tx_hash.hex())

        logger.info(f"Token {token_id} registered in block {receipt['blockNumber']}")
        return receipt
