"""Tests for two-sided deposits and proportional withdrawals."""

import pytest

from stableswap.constants import MINIMUM_LIQUIDITY
from stableswap.errors import (
    AmountTooSmall,
    InitialDepositTooSmall,
    InsufficientLiquidity,
    PoolPaused,
    SlippageExceeded,
    VaultBalanceMismatch,
    ZeroAmount,
)
from stableswap.liquidity import add_liquidity, exit_fee_bps, remove_liquidity
from stableswap.math import calculate_d
from stableswap.migration import add_liquidity_single_sided, migrate
from stableswap.state import Side, SwapDirection, VaultHoldings
from tests.helpers import SEED, START_TIME, holdings, make_pool


def deposit(pool, amount_a, amount_b, min_lp=0, vault=None):
    return add_liquidity(
        pool,
        amount_a,
        amount_b,
        min_lp,
        vault=vault if vault is not None else holdings(pool),
        now=START_TIME,
    )


class TestFirstDeposit:
    """Tests for seeding an empty pool."""

    def test_mints_d_minus_minimum_liquidity(self):
        pool = make_pool()
        result = deposit(pool, SEED, SEED)

        assert result.first_deposit
        assert result.d1 == 2 * SEED
        assert result.lp_minted == 2 * SEED - MINIMUM_LIQUIDITY
        assert pool.lp_supply == 2 * SEED
        assert pool.balance_a == SEED
        assert pool.balance_b == SEED

    def test_first_deposit_charges_no_fee(self):
        pool = make_pool()
        result = deposit(pool, SEED, 3 * SEED)
        assert result.imbalance_fee_a == 0
        assert result.imbalance_fee_b == 0
        assert pool.admin_fees_a == 0
        assert pool.admin_fees_b == 0

    def test_exact_minimum_accepted(self):
        pool = make_pool()
        deposit(pool, SEED, SEED)
        assert pool.lp_supply > 0

    @pytest.mark.parametrize("amounts", [(SEED - 1, SEED), (SEED, SEED - 1)])
    def test_below_minimum_rejected(self, amounts):
        pool = make_pool()
        with pytest.raises(InitialDepositTooSmall):
            deposit(pool, *amounts)
        assert pool.lp_supply == 0
        assert pool.balance_a == 0


class TestAddLiquidity:
    """Tests for deposits into a live pool."""

    def test_balanced_deposit_is_proportional(self):
        """A deposit matching the pool ratio mints proportionally and pays no fee."""
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        result = deposit(pool, SEED // 10, SEED // 10)

        assert result.lp_minted == 2 * SEED // 10
        assert result.imbalance_fee_a == 0
        assert result.imbalance_fee_b == 0
        assert pool.lp_supply == 2 * SEED + 2 * SEED // 10

    def test_imbalanced_deposit_pays_fee(self):
        pool = make_pool(balance_a=100 * SEED, balance_b=100 * SEED, lp_supply=200 * SEED)
        result = deposit(pool, 10 * SEED, 0)

        assert result.imbalance_fee_a > 0
        assert result.imbalance_fee_b > 0
        assert result.admin_fee_a == result.imbalance_fee_a * 50 // 100
        assert result.admin_fee_b == result.imbalance_fee_b * 50 // 100
        assert pool.admin_fees_a == result.admin_fee_a
        assert pool.admin_fees_b == result.admin_fee_b
        # One-sided deposit is worth less than its face value in LP
        assert result.lp_minted < 10 * SEED

    @pytest.mark.parametrize(
        "amount_a,amount_b",
        [(SEED, SEED), (SEED, 0), (0, SEED), (1_000_000, 7 * SEED), (37 * SEED, 1)],
    )
    def test_d_never_decreases(self, amount_a, amount_b):
        pool = make_pool(balance_a=50 * SEED, balance_b=80 * SEED, lp_supply=130 * SEED)
        d_before = calculate_d(pool.balance_a, pool.balance_b, pool.amplification)

        result = deposit(pool, amount_a, amount_b)

        assert result.d0 == d_before
        assert result.d1 > result.d0
        assert calculate_d(pool.balance_a, pool.balance_b, pool.amplification) >= d_before

    def test_both_zero_rejected(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(ZeroAmount):
            deposit(pool, 0, 0)

    def test_paused_rejected(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED, paused=True)
        with pytest.raises(PoolPaused):
            deposit(pool, SEED, SEED)

    def test_vault_shortfall_rejected_without_mutation(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(VaultBalanceMismatch):
            deposit(pool, SEED, SEED, vault=VaultHoldings(a=SEED, b=SEED - 1))
        assert pool.balance_a == SEED
        assert pool.balance_b == SEED
        assert pool.lp_supply == 2 * SEED

    def test_vault_surplus_tolerated(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        deposit(pool, SEED, SEED, vault=holdings(pool, extra_a=500))
        assert pool.balance_a == 2 * SEED

    def test_slippage(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(SlippageExceeded):
            deposit(pool, SEED, SEED, min_lp=2 * SEED + 1)
        assert pool.lp_supply == 2 * SEED

    def test_too_small_to_mint(self):
        """A deposit worth less than one LP token is rejected."""
        pool = make_pool(balance_a=10**10, balance_b=10**10, lp_supply=MINIMUM_LIQUIDITY)
        with pytest.raises(AmountTooSmall):
            deposit(pool, 1_000_000, 1_000_000)


class TestEmptySideDeposit:
    """Tests for two-sided deposits while one side of the pool is empty."""

    def test_after_single_sided_seed(self):
        pool = make_pool()
        add_liquidity_single_sided(pool, SEED, Side.A, SEED - MINIMUM_LIQUIDITY, vault=holdings(pool))
        assert pool.lp_supply == SEED

        result = deposit(pool, SEED, SEED)

        assert result.d0 == 0
        assert result.lp_minted == 2 * SEED
        assert result.imbalance_fee_a == 0
        assert result.imbalance_fee_b == 0
        assert pool.lp_supply == 3 * SEED
        assert (pool.balance_a, pool.balance_b) == (2 * SEED, SEED)

    def test_after_migration_drains_a_side(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        # 100_133_878 minus the 133_878 fee pays out exactly SEED
        migrate(
            pool,
            100_133_878,
            SEED,
            START_TIME + 60,
            SwapDirection.A_TO_B,
            vault=holdings(pool),
            now=START_TIME,
        )
        assert pool.balance_b == 0
        total = pool.balance_a + pool.balance_b

        result = deposit(pool, SEED, SEED)

        assert result.lp_minted == 2 * SEED * 2 * SEED // total
        assert pool.lp_supply == 2 * SEED + result.lp_minted
        assert pool.balance_b == SEED

    def test_one_asset_into_filled_side(self):
        pool = make_pool(balance_a=SEED, balance_b=0, lp_supply=SEED)
        result = deposit(pool, 1_000, 0)
        assert result.lp_minted == 1_000
        assert pool.balance_a == SEED + 1_000

    def test_lp_outstanding_with_no_balances(self):
        pool = make_pool(lp_supply=SEED)
        with pytest.raises(InsufficientLiquidity):
            deposit(pool, SEED, SEED)
        assert pool.lp_supply == SEED


class TestExitFee:
    """Tests for exit_fee_bps."""

    def test_balanced_pool_is_free(self):
        assert exit_fee_bps(make_pool(balance_a=SEED, balance_b=SEED)) == 0

    def test_scales_with_imbalance(self):
        """75/25 is half-way to total imbalance, so half the swap fee."""
        assert exit_fee_bps(make_pool(balance_a=3 * SEED, balance_b=SEED, swap_fee_bps=100)) == 50
        assert exit_fee_bps(make_pool(balance_a=SEED, balance_b=3 * SEED, swap_fee_bps=100)) == 50

    def test_fully_imbalanced_is_full_fee(self):
        assert exit_fee_bps(make_pool(balance_a=SEED, balance_b=0, swap_fee_bps=100)) == 100

    def test_empty_pool(self):
        assert exit_fee_bps(make_pool()) == 0


class TestRemoveLiquidity:
    """Tests for remove_liquidity."""

    def test_balanced_withdrawal(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        result = remove_liquidity(pool, 20_000_000, 0, 0)

        assert (result.amount_a, result.amount_b) == (10_000_000, 10_000_000)
        assert result.effective_fee_bps == 0
        assert pool.lp_supply == 2 * SEED - 20_000_000
        assert pool.balance_a == SEED - 10_000_000

    def test_imbalanced_withdrawal_charges_exit_fee(self):
        pool = make_pool(
            balance_a=300_000_000, balance_b=100_000_000, lp_supply=400_000_000, swap_fee_bps=100
        )
        result = remove_liquidity(pool, 40_000_000, 0, 0)

        assert result.effective_fee_bps == 50
        assert (result.gross_a, result.gross_b) == (30_000_000, 10_000_000)
        assert (result.fee_a, result.fee_b) == (150_000, 50_000)
        assert (result.amount_a, result.amount_b) == (29_850_000, 9_950_000)
        # Tracked balances drop by the gross amounts
        assert (pool.balance_a, pool.balance_b) == (270_000_000, 90_000_000)
        assert (pool.admin_fees_a, pool.admin_fees_b) == (75_000, 25_000)
        assert pool.lp_supply == 360_000_000

    def test_allowed_while_paused(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED, paused=True)
        result = remove_liquidity(pool, 1_000_000, 0, 0)
        assert result.amount_a > 0

    def test_zero_rejected(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(ZeroAmount):
            remove_liquidity(pool, 0, 0, 0)

    @pytest.mark.parametrize("lp_amount", [2 * SEED, 2 * SEED + 1, 2 * SEED - MINIMUM_LIQUIDITY + 1])
    def test_cannot_drain_locked_liquidity(self, lp_amount):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(InsufficientLiquidity):
            remove_liquidity(pool, lp_amount, 0, 0)
        assert pool.lp_supply == 2 * SEED

    def test_can_withdraw_down_to_minimum(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        remove_liquidity(pool, 2 * SEED - MINIMUM_LIQUIDITY, 0, 0)
        assert pool.lp_supply == MINIMUM_LIQUIDITY

    @pytest.mark.parametrize("mins", [(10_000_001, 0), (0, 10_000_001)])
    def test_slippage(self, mins):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        with pytest.raises(SlippageExceeded):
            remove_liquidity(pool, 20_000_000, *mins)
        assert pool.balance_a == SEED
        assert pool.lp_supply == 2 * SEED


class TestRoundTrip:
    """Withdrawing and re-depositing never creates LP from nothing."""

    def test_remove_then_add(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
        burned = 20_000_000

        removed = remove_liquidity(pool, burned, 0, 0)
        readded = deposit(pool, removed.amount_a, removed.amount_b)

        assert readded.lp_minted <= burned
        assert readded.lp_minted >= burned - 1

    def test_remove_then_add_imbalanced(self):
        pool = make_pool(balance_a=3 * SEED, balance_b=SEED, lp_supply=4 * SEED)
        burned = 40_000_000

        removed = remove_liquidity(pool, burned, 0, 0)
        readded = deposit(pool, removed.amount_a, removed.amount_b)

        assert readded.lp_minted <= burned
