"""Web3 connection and contract handles"""

from typing import Any, Optional
import aiohttp
from web3 import AsyncWeb3
from loguru import logger

from .abi import ERC721_ABI, REGISTRY_ABI
from .config import Config
from .utils import validate_ethereum_address


def build_web3(config: Config) -> AsyncWeb3:
    """Create an AsyncWeb3 instance for the configured RPC endpoint"""
    provider = AsyncWeb3.AsyncHTTPProvider(
        config.rpc_url,
        request_kwargs={"timeout": aiohttp.ClientTimeout(total=config.timeout)},
    )
    return AsyncWeb3(provider)


def _checksum(address: str, label: str) -> str:
    is_valid, checksum = validate_ethereum_address(address)
    if not is_valid:
        raise ValueError(f"Invalid {label} address: {address}")
    return checksum


def load_collection_contract(w3: AsyncWeb3, address: str) -> Any:
    """Read-only handle for the ERC-721 collection"""
    contract = w3.eth.contract(address=_checksum(address, "collection"), abi=ERC721_ABI)
    logger.debug(f"Collection contract loaded at {contract.address}")
    return contract


def load_registry_contract(w3: AsyncWeb3, address: Optional[str]) -> Optional[Any]:
    """Handle for the claim registry, None when no registry is configured"""
    if not address:
        return None
    contract = w3.eth.contract(address=_checksum(address, "registry"), abi=REGISTRY_ABI)
    logger.debug(f"Registry contract loaded at {contract.address}")
    return contract
