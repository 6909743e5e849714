"""Utility functions for address handling and URI normalization"""

import re
from typing import Any, Optional, Tuple
from eth_utils import is_address, to_checksum_address
from loguru import logger

IPFS_SCHEME = "ipfs://"


def validate_ethereum_address(address: str) -> Tuple[bool, Optional[str]]:
    """
    Validate Ethereum address format

    Returns:
        (is_valid, checksum_address or None)
    """
    if not address or not isinstance(address, str):
        return False, None

    address = address.strip()

    # Check basic format
    if not re.match(r'^0x[a-fA-F0-9]{40}$', address):
        return False, None

    try:
        if is_address(address):
            return True, to_checksum_address(address)
    except Exception as e:
        logger.debug(f"Address validation error: {e}")

    # Mixed-case input with a bad checksum: the bytes are still a valid address
    return True, to_checksum_address(address.lower())


def addresses_equal(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two chain addresses ignoring case

    Addresses are rendered mixed-case (EIP-55 checksum) but identify the same
    20 bytes regardless of case.
    """
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    a, b = a.strip(), b.strip()
    if not a or not b:
        return False
    return a.lower() == b.lower()


def convert_ipfs_to_http(url: str, gateway: str = "https://ipfs.io/ipfs/") -> str:
    """
    Rewrite an ipfs:// locator to an HTTP gateway URL

    Only the scheme prefix is rewritten, the hash and any path after it are
    kept. Every other URL form is returned untouched.
    """
    if url.startswith(IPFS_SCHEME):
        if not gateway.endswith("/"):
            gateway = gateway + "/"
        return gateway + url[len(IPFS_SCHEME):].lstrip("/")
    return url


def normalize_token_id(value: Any) -> str:
    """
    Canonical string form of a token ID

    On-chain uint256 values arrive as int, hex or decimal strings depending on
    the decoder; both sides of a comparison go through this.
    """
    if isinstance(value, bool):
        raise TypeError("Token ID cannot be a boolean")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        if value.lower().startswith("0x"):
            return str(int(value, 16))
        return str(int(value))
    return str(int(value))


def parse_chain_id(value: Any) -> int:
    """Chain IDs arrive as ints or as hex strings ("0x2105") from wallet events"""
    if isinstance(value, int):
        return value
    value = str(value).strip()
    if value.lower().startswith("0x"):
        return int(value, 16)
    return int(value)
