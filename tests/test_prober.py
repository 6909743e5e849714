"""
Unit tests for the ownership prober.

Tests follow the Given/When/Then pattern for clarity.
"""

import asyncio

import pytest

from trait_scout.prober import OwnershipProber

from fakes import OTHER_WALLET, WALLET, ContractRevert, FakeContract, make_collection


class TestOwnershipProber:
    """Tests for OwnershipProber.probe."""

    def test_returns_token_id_when_target_owns_it(self):
        """
        Given a token owned by the target address
        When probing it
        Then the token ID should be returned
        """
        # Given
        contract = make_collection({12: WALLET})

        # When
        result = asyncio.run(OwnershipProber().probe(12, WALLET, contract))

        # Then
        assert result == 12

    def test_token_zero_is_a_valid_owned_token(self):
        contract = make_collection({0: WALLET})

        assert asyncio.run(OwnershipProber().probe(0, WALLET, contract)) == 0

    def test_comparison_ignores_address_case(self):
        """
        Given an owner rendered lowercase and a checksummed target
        When probing
        Then ownership should still be detected
        """
        # Given
        contract = make_collection({12: WALLET.lower()})

        # When
        result = asyncio.run(OwnershipProber().probe(12, WALLET, contract))

        # Then
        assert result == 12

    def test_returns_none_when_owned_by_someone_else(self):
        contract = make_collection({7: OTHER_WALLET})

        assert asyncio.run(OwnershipProber().probe(7, WALLET, contract)) is None

    @pytest.mark.parametrize("error", [
        ContractRevert("ERC721: invalid token ID"),
        ConnectionError("RPC unavailable"),
        ValueError("Could not decode contract function call"),
    ])
    def test_failed_owner_call_is_treated_as_not_owned(self, error):
        """
        Given an ownerOf call that raises
        When probing
        Then None should be returned instead of raising
        """
        # Given
        def owner_of(token_id):
            raise error

        contract = FakeContract(ownerOf=owner_of)

        # When
        result = asyncio.run(OwnershipProber().probe(3, WALLET, contract))

        # Then
        assert result is None

    def test_malformed_owner_value_is_not_owned(self):
        contract = FakeContract(ownerOf=lambda token_id: None)

        assert asyncio.run(OwnershipProber().probe(3, WALLET, contract)) is None

    def test_failures_are_not_retried(self):
        calls = []

        def owner_of(token_id):
            calls.append(token_id)
            raise ConnectionError("blip")

        asyncio.run(OwnershipProber().probe(9, WALLET, FakeContract(ownerOf=owner_of)))

        assert calls == [9]
