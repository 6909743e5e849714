"""
Pytest configuration and shared fixtures for trait-scout tests.
"""

import pytest

from trait_scout.config import Config
from trait_scout.metadata import MetadataResolver
from trait_scout.scout import TraitScout

from fakes import (
    METADATA_BASE_URL,
    OTHER_WALLET,
    REQUIRED_TRAITS,
    WALLET,
    FakeHttpSession,
    FakeWeb3,
    make_collection,
    make_registry,
    metadata_doc,
    metadata_url,
)


@pytest.fixture
def sample_wallet_address():
    """Checksummed wallet address used as the scan target."""
    return WALLET


@pytest.fixture
def test_config():
    """Config for a small 50-token collection with a registry."""
    return Config(
        rpc_url="http://localhost:8545",
        chain_id=8453,
        metadata_base_url=METADATA_BASE_URL,
        max_token_id=50,
        max_workers=10,
        required_traits=list(REQUIRED_TRAITS),
        private_key=None,
    )


@pytest.fixture
def collection_config(test_config):
    return test_config.get_collection_config()


@pytest.fixture
def http_session():
    """Metadata host serving documents for tokens 12 (Island) and 45 (Market)."""
    return FakeHttpSession({
        metadata_url(12): metadata_doc("Island", "ipfs://QmIsland/12.png"),
        metadata_url(45): metadata_doc("Market", "https://img.test/45.png"),
    })


@pytest.fixture
def resolver(collection_config, test_config, http_session):
    return MetadataResolver(collection_config, test_config, session=http_session)


@pytest.fixture
def make_scout(test_config, resolver):
    """Build a TraitScout wired to fakes."""

    def _make(collection=None, registry=None, w3=None, config=None):
        return TraitScout(
            config or test_config,
            w3=w3 or FakeWeb3(),
            collection_contract=collection or make_collection({12: WALLET, 45: WALLET, 7: OTHER_WALLET}),
            registry_contract=registry or make_registry(registered=[12], valid_claims=2, collected_claims=1),
            resolver=resolver,
        )

    return _make
