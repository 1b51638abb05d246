"""Pytest configuration and fixtures."""

from dataclasses import dataclass

import pytest

from stableswap.engine import StableSwapEngine
from stableswap.ledger import InMemoryLedger
from tests.helpers import ALICE, AUTHORITY, BOB, REWARD, SEED, START_TIME, USDC, USDT

# Funding for every test identity
FUNDING = 10**15


@dataclass
class ManualClock:
    """Clock the tests advance explicitly."""

    now: int = START_TIME

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Ledger with USDC, USDT and the reward asset for every identity."""
    ledger = InMemoryLedger()
    for account in (AUTHORITY, ALICE, BOB):
        for asset in (USDC, USDT, REWARD):
            ledger.mint(asset, account, FUNDING)
    return ledger


@pytest.fixture
def engine(ledger: InMemoryLedger, clock: ManualClock) -> StableSwapEngine:
    return StableSwapEngine(ledger, clock=clock)


@pytest.fixture
def pool_id(engine: StableSwapEngine) -> int:
    """Initialized, empty pool with amplification 100."""
    pool_id = engine.create_pool(AUTHORITY, USDC, USDT, 100)
    engine.init_vaults(pool_id, AUTHORITY)
    return pool_id


@pytest.fixture
def seeded_pool_id(engine: StableSwapEngine, pool_id: int) -> int:
    """Pool seeded by ALICE with 100x the minimum deposit on each side."""
    engine.add_liquidity(pool_id, ALICE, 100 * SEED, 100 * SEED, 0)
    return pool_id
