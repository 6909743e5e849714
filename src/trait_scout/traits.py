"""Trait statistics over a scan result"""

from collections import Counter
from typing import Iterable, Union

from .models import ScanResult, TokenRecord, TraitSummary


def aggregate(
    tokens: Union[ScanResult, Iterable[TokenRecord]],
    required_traits: Iterable[str],
) -> TraitSummary:
    """
    Count traits and list the required ones not yet held

    "Unknown" is counted like any other trait. Missing traits keep the order
    in which they were required.
    """
    if isinstance(tokens, ScanResult):
        tokens = tokens.tokens
    tally = Counter(token.trait for token in tokens)
    missing = []
    for trait in required_traits:
        if trait not in tally and trait not in missing:
            missing.append(trait)
    return TraitSummary(tally=dict(tally), missing=missing)
