"""Single-token ownership checks against an ERC-721 contract"""

from typing import Any, Optional
from loguru import logger

from .utils import addresses_equal


class OwnershipProber:
    """
    Tests whether a wallet currently holds a given token ID

    A failed ownerOf call (unminted token, RPC error, undecodable response)
    is indistinguishable from "owned by someone else" and resolves to None.
    There is no retry: a transient failure is a missed token for this scan.
    """

    async def probe(self, token_id: int, target_address: str, contract: Any) -> Optional[int]:
        """Return token_id if target_address owns it, otherwise None"""
        try:
            owner = await contract.functions.ownerOf(token_id).call()
        except Exception as e:
            logger.debug(f"ownerOf({token_id}) failed: {e}")
            return None

        if addresses_equal(owner, target_address):
            logger.debug(f"Token {token_id} is owned by {target_address}")
            return token_id
        return None
