"""Test helpers module for shared test utilities.

- constants: Asset ids, accounts and common amounts
- factories: Pool and ledger factory functions
"""

from tests.helpers.constants import (
    ADMIN,
    ALICE,
    BOB,
    BTC,
    CREATOR,
    ETH,
    FEE_RECIPIENT,
    FUNDED_AMOUNT,
    SEED_AMOUNT,
    USD,
)
from tests.helpers.factories import fund, make_pool

__all__ = [
    "ADMIN",
    "ALICE",
    "BOB",
    "BTC",
    "CREATOR",
    "ETH",
    "FEE_RECIPIENT",
    "FUNDED_AMOUNT",
    "SEED_AMOUNT",
    "USD",
    "fund",
    "make_pool",
]
