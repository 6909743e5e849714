"""
Unit tests for the registry merger.

Tests follow the Given/When/Then pattern for clarity.
"""

import asyncio
from types import SimpleNamespace

import pytest

from trait_scout.exceptions import RegistrationError
from trait_scout.models import ClaimStats, TokenRecord
from trait_scout.registry import RegistryMerger
from trait_scout.session import WalletSession

from fakes import OTHER_WALLET, TX_HASH, WALLET, FakeContract, FakeWeb3, make_registry


def owned(*token_ids):
    return [TokenRecord(token_id=t, image_url=f"https://img.test/{t}.png", trait="Island") for t in token_ids]


class TestMerge:
    """Tests for RegistryMerger.merge."""

    def test_flags_registered_tokens_only(self):
        """
        Given owned tokens 12 and 45 and a registry holding 12 and 99
        When merging
        Then only token 12 should be flagged as registered
        """
        # Given
        registry = make_registry(registered=[12, 99])

        # When
        enriched, _ = asyncio.run(RegistryMerger().merge(owned(12, 45), registry, WALLET))

        # Then
        flags = {t.token_id: t.is_registered for t in enriched}
        assert flags == {12: True, 45: False}

    def test_reads_registered_list_once(self):
        registry = make_registry(registered=[1, 2, 3])

        asyncio.run(RegistryMerger().merge(owned(1, 2, 3, 4, 5), registry, WALLET))

        assert registry.call_count("getRegisteredNFTs") == 1

    @pytest.mark.parametrize("entries", [
        [45],
        ["45"],
        ["0x2d"],
        [(45, OTHER_WALLET, "Market")],
        [[45, OTHER_WALLET, "Market"]],
        [{"tokenId": 45, "trait": "Market"}],
        [SimpleNamespace(tokenId=45, trait="Market")],
    ])
    def test_normalizes_registry_entry_shapes(self, entries):
        """
        Given registry entries decoded in various shapes
        When merging
        Then token 45 should be recognized as registered in all of them
        """
        # Given
        registry = make_registry(registered=[])
        registry.handlers["getRegisteredNFTs"] = lambda: entries

        # When
        enriched, _ = asyncio.run(RegistryMerger().merge(owned(45), registry, WALLET))

        # Then
        assert enriched[0].is_registered

    def test_undecodable_entries_are_skipped(self):
        registry = make_registry(registered=[])
        registry.handlers["getRegisteredNFTs"] = lambda: [{"owner": WALLET}, "garbage", (12, WALLET, "Island")]

        enriched, _ = asyncio.run(RegistryMerger().merge(owned(12), registry, WALLET))

        assert enriched[0].is_registered

    def test_reads_claim_counters_independently(self):
        """
        Given a registry reporting 3 valid and 1 collected claims
        When merging a wallet with no owned tokens
        Then the counters should still come from the registry
        """
        # Given
        registry = make_registry(registered=[], valid_claims=3, collected_claims=1)

        # When
        enriched, stats = asyncio.run(RegistryMerger().merge([], registry, WALLET))

        # Then
        assert enriched == []
        assert stats == ClaimStats(valid_claims=3, collected_claims=1)
        assert ("getClaimCountByUser", (WALLET,)) in registry.calls
        assert ("userClaimCounts", (WALLET,)) in registry.calls

    def test_registry_failure_propagates(self):
        def broken():
            raise ConnectionError("registry unreachable")

        registry = make_registry(registered=[])
        registry.handlers["getRegisteredNFTs"] = broken

        with pytest.raises(ConnectionError):
            asyncio.run(RegistryMerger().merge(owned(12), registry, WALLET))

    def test_does_not_mutate_input_records(self):
        records = owned(12)
        registry = make_registry(registered=[12])

        enriched, _ = asyncio.run(RegistryMerger().merge(records, registry, WALLET))

        assert records[0].is_registered is False
        assert enriched[0].is_registered is True


class TestRegisterNft:
    """Tests for RegistryMerger.register_nft."""

    def test_sends_transaction_from_connected_address(self):
        """
        Given a session without a private key
        When registering token 45
        Then registerNFT should be sent from the session address and the receipt returned
        """
        # Given
        registry = make_registry(registered=[])
        w3 = FakeWeb3()
        session = WalletSession.connect(WALLET, chain_id=8453)

        # When
        receipt = asyncio.run(RegistryMerger().register_nft(w3, registry, session, 45, "Market"))

        # Then
        assert receipt["status"] == 1
        assert registry.transactions == [("registerNFT", (45, "Market"), {"from": WALLET})]

    def test_signs_locally_with_private_key(self):
        registry = make_registry(registered=[])
        w3 = FakeWeb3()
        session = WalletSession.connect(WALLET, chain_id=8453, private_key="0x" + "11" * 32)

        asyncio.run(RegistryMerger().register_nft(w3, registry, session, 45, "Market"))

        signed_tx = w3.eth.account.account.signed[0]
        assert signed_tx["from"] == WALLET
        assert signed_tx["nonce"] == 7
        assert w3.eth.raw_sent == [b"signed"]
        assert registry.transactions == []

    def test_private_key_for_other_account_is_rejected(self):
        registry = make_registry(registered=[])
        w3 = FakeWeb3(account_address=OTHER_WALLET)
        session = WalletSession.connect(WALLET, private_key="0x" + "11" * 32)

        with pytest.raises(RegistrationError) as exc_info:
            asyncio.run(RegistryMerger().register_nft(w3, registry, session, 45, "Market"))

        assert exc_info.value.token_id == 45
        assert w3.eth.raw_sent == []

    def test_reverted_transaction_raises_with_token_context(self):
        """
        Given a registration transaction that is mined but reverts
        When registering token 45
        Then RegistrationError should carry the token ID and transaction hash
        """
        # Given
        registry = make_registry(registered=[])
        w3 = FakeWeb3(receipt_status=0)
        session = WalletSession.connect(WALLET)

        # When
        with pytest.raises(RegistrationError) as exc_info:
            asyncio.run(RegistryMerger().register_nft(w3, registry, session, 45, "Market"))

        # Then
        assert exc_info.value.token_id == 45
        assert exc_info.value.tx_hash == TX_HASH.hex()
        assert "45" in str(exc_info.value)

    def test_rejected_transaction_is_not_retried(self):
        attempts = []

        def reject(token_id, trait):
            attempts.append(token_id)
            raise ValueError("user rejected transaction")

        registry = FakeContract(registerNFT=reject)
        session = WalletSession.connect(WALLET)

        with pytest.raises(RegistrationError) as exc_info:
            asyncio.run(RegistryMerger().register_nft(FakeWeb3(), registry, session, 45, "Market"))

        assert attempts == [45]
        assert exc_info.value.tx_hash is None
