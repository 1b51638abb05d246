"""Tests for pool administration."""

import pytest

from stableswap.admin import (
    cancel_authority_transfer,
    complete_authority_transfer,
    initiate_authority_transfer,
    require_authority,
    set_paused,
    update_swap_fee,
    withdraw_admin_fees,
    withdrawable_admin_fees,
)
from stableswap.errors import (
    FeeTooHigh,
    InvalidAuthority,
    NoFeesToWithdraw,
    NoTransferPending,
    TimelockNotExpired,
    Unauthorized,
)
from stableswap.state import VaultHoldings
from tests.helpers import ALICE, AUTHORITY, BOB, DAY, SEED, START_TIME, make_pool


class TestAuthority:
    """Tests for require_authority."""

    def test_authority_passes(self):
        require_authority(make_pool(), AUTHORITY)

    def test_other_rejected(self):
        with pytest.raises(Unauthorized):
            require_authority(make_pool(), ALICE)


class TestSwapFee:
    """Tests for update_swap_fee."""

    def test_update(self):
        pool = make_pool()
        update_swap_fee(pool, 30)
        assert pool.swap_fee_bps == 30

    def test_maximum_accepted(self):
        pool = make_pool()
        update_swap_fee(pool, 100)
        assert pool.swap_fee_bps == 100

    def test_too_high(self):
        pool = make_pool()
        with pytest.raises(FeeTooHigh):
            update_swap_fee(pool, 101)
        assert pool.swap_fee_bps == 4


class TestPause:
    """Tests for set_paused."""

    def test_toggle(self):
        pool = make_pool()
        set_paused(pool, True)
        assert pool.paused
        set_paused(pool, False)
        assert not pool.paused


class TestWithdrawAdminFees:
    """Tests for withdraw_admin_fees."""

    def test_nothing_accrued(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED)
        with pytest.raises(NoFeesToWithdraw):
            withdraw_admin_fees(pool, VaultHoldings(a=2 * SEED, b=2 * SEED))

    def test_full_withdrawal(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, admin_fees_a=500, admin_fees_b=700)
        assert withdraw_admin_fees(pool, VaultHoldings(a=SEED + 500, b=SEED + 700)) == (500, 700)
        assert (pool.admin_fees_a, pool.admin_fees_b) == (0, 0)

    def test_capped_by_surplus(self):
        """Withdrawals never dip into tracked balances."""
        pool = make_pool(balance_a=SEED, balance_b=SEED, admin_fees_a=500, admin_fees_b=700)
        assert withdraw_admin_fees(pool, VaultHoldings(a=SEED + 200, b=SEED)) == (200, 0)
        assert (pool.admin_fees_a, pool.admin_fees_b) == (300, 700)

    def test_no_surplus(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, admin_fees_a=500)
        with pytest.raises(NoFeesToWithdraw):
            withdraw_admin_fees(pool, VaultHoldings(a=SEED, b=SEED))
        assert pool.admin_fees_a == 500

    def test_shortfall_treated_as_no_surplus(self):
        pool = make_pool(balance_a=SEED, balance_b=SEED, admin_fees_a=500)
        assert withdrawable_admin_fees(pool, VaultHoldings(a=SEED - 10, b=SEED)) == (0, 0)


class TestAuthorityTransfer:
    """Tests for the two-step, time-locked authority transfer."""

    def test_full_transfer(self):
        pool = make_pool()
        initiate_authority_transfer(pool, ALICE, START_TIME)
        assert pool.pending_authority == ALICE

        complete_authority_transfer(pool, ALICE, START_TIME + 2 * DAY)

        assert pool.authority == ALICE
        assert pool.pending_authority is None
        assert pool.authority_transfer_time is None

    def test_empty_authority(self):
        with pytest.raises(InvalidAuthority):
            initiate_authority_transfer(make_pool(), "", START_TIME)

    def test_timelock(self):
        pool = make_pool()
        initiate_authority_transfer(pool, ALICE, START_TIME)
        with pytest.raises(TimelockNotExpired):
            complete_authority_transfer(pool, ALICE, START_TIME + 2 * DAY - 1)
        assert pool.authority == AUTHORITY

    def test_only_pending_authority_completes(self):
        pool = make_pool()
        initiate_authority_transfer(pool, ALICE, START_TIME)
        with pytest.raises(Unauthorized):
            complete_authority_transfer(pool, BOB, START_TIME + 2 * DAY)
        with pytest.raises(Unauthorized):
            complete_authority_transfer(pool, AUTHORITY, START_TIME + 2 * DAY)

    def test_complete_without_pending(self):
        with pytest.raises(NoTransferPending):
            complete_authority_transfer(make_pool(), ALICE, START_TIME)

    def test_cancel(self):
        pool = make_pool()
        initiate_authority_transfer(pool, ALICE, START_TIME)
        cancel_authority_transfer(pool)
        assert pool.pending_authority is None
        with pytest.raises(NoTransferPending):
            complete_authority_transfer(pool, ALICE, START_TIME + 2 * DAY)

    def test_cancel_without_pending(self):
        with pytest.raises(NoTransferPending):
            cancel_authority_transfer(make_pool())

    def test_reinitiate_restarts_timelock(self):
        pool = make_pool()
        initiate_authority_transfer(pool, ALICE, START_TIME)
        initiate_authority_transfer(pool, BOB, START_TIME + DAY)
        with pytest.raises(TimelockNotExpired):
            complete_authority_transfer(pool, BOB, START_TIME + 2 * DAY)
        complete_authority_transfer(pool, BOB, START_TIME + 3 * DAY)
        assert pool.authority == BOB
