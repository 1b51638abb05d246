"""Test helpers module for shared test utilities.

- constants: Asset ids, identities and common amounts
- factories: Pool and farm record factories
"""

from tests.helpers.constants import (
    ALICE,
    AUTHORITY,
    BOB,
    DAY,
    HOUR,
    REWARD,
    SEED,
    START_TIME,
    USDC,
    USDT,
)
from tests.helpers.factories import holdings, make_farm, make_pool

__all__ = [
    # Constants
    "ALICE",
    "AUTHORITY",
    "BOB",
    "DAY",
    "HOUR",
    "REWARD",
    "SEED",
    "START_TIME",
    "USDC",
    "USDT",
    # Factories
    "holdings",
    "make_farm",
    "make_pool",
]
