"""Add and remove liquidity against a pool.

LP issuance is priced by invariant growth; redemptions are proportional
with an exit fee that scales with how far the pool is from 50/50.

Uses SafeInt for every product and quotient, and validates every
precondition before the pool record is written.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from stableswap.amplification import get_current_amplification
from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import (
    BALANCED_RATIO_BPS,
    BPS_DENOMINATOR,
    MINIMUM_LIQUIDITY,
    PERCENT_DENOMINATOR,
)
from stableswap.errors import (
    AmountTooSmall,
    InitialDepositTooSmall,
    InsufficientLiquidity,
    InvariantViolation,
    SlippageExceeded,
    ZeroAmount,
)
from stableswap.guards import require_not_paused, require_u64, require_vault_consistency
from stableswap.math.invariant import calculate_d
from stableswap.safe_int import S, Underflow
from stableswap.state import Pool, VaultHoldings

logger = structlog.get_logger()


@dataclass(frozen=True)
class AddLiquidityResult:
    """Outcome of a two-sided deposit.

    Attributes:
        lp_minted: LP tokens owed to the depositor
        d0: Invariant before the deposit
        d1: Invariant after the deposit
        imbalance_fee_a: Imbalance fee charged on asset A
        imbalance_fee_b: Imbalance fee charged on asset B
        admin_fee_a: Admin share of imbalance_fee_a
        admin_fee_b: Admin share of imbalance_fee_b
        first_deposit: True if this deposit seeded the pool
    """

    lp_minted: int
    d0: int
    d1: int
    imbalance_fee_a: int = 0
    imbalance_fee_b: int = 0
    admin_fee_a: int = 0
    admin_fee_b: int = 0
    first_deposit: bool = False


@dataclass(frozen=True)
class RemoveLiquidityResult:
    """Outcome of a proportional withdrawal.

    `amount_a`/`amount_b` are what the caller receives; the tracked balances
    drop by the gross amounts.
    """

    amount_a: int
    amount_b: int
    gross_a: int
    gross_b: int
    fee_a: int
    fee_b: int
    admin_fee_a: int
    admin_fee_b: int
    effective_fee_bps: int


def _imbalance_fee(old_balance: int, new_balance: int, d0: int, d1: int, fee_bps: int) -> int:
    # ideal = old * D1 / D0; fee on |actual - ideal|
    ideal = S(old_balance) * d1 // d0
    return (ideal.abs_diff(new_balance) * fee_bps // BPS_DENOMINATOR).value


def _admin_share(fee: int, admin_fee_percent: int) -> int:
    return (S(fee) * admin_fee_percent // PERCENT_DENOMINATOR).value


def add_liquidity(
    pool: Pool,
    amount_a: int,
    amount_b: int,
    min_lp: int,
    *,
    vault: VaultHoldings,
    now: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> AddLiquidityResult:
    """Deposit any ratio of the two assets and mint LP tokens.

    First deposit mints D1 - MINIMUM_LIQUIDITY and locks MINIMUM_LIQUIDITY
    forever. Later deposits mint (D1 - D0) * lp_supply / D0 and pay an
    imbalance fee whose admin share is credited to the fee accumulators.
    While one side is empty D is zero, so deposits are priced at face value,
    (amount_a + amount_b) * lp_supply / (balance_a + balance_b), with no fee.

    Raises:
        PoolPaused: Pool is paused
        ZeroAmount: Both amounts are zero
        VaultBalanceMismatch: A vault holds less than its tracked balance
        InitialDepositTooSmall: First deposit below min_initial_deposit on a side
        InsufficientLiquidity: Pool has LP outstanding but no balances
        InvariantViolation: D did not increase
        SlippageExceeded: Minted LP below min_lp
        AmountTooSmall: Deposit too small to mint any LP
        MathOverflow: Arithmetic overflow
    """
    require_u64("amount_a", amount_a)
    require_u64("amount_b", amount_b)
    require_u64("min_lp", min_lp)
    require_not_paused(pool)
    if amount_a == 0 and amount_b == 0:
        raise ZeroAmount("Deposit must include at least one asset")
    require_vault_consistency(pool, vault)

    first_deposit = pool.lp_supply == 0
    if first_deposit and (
        amount_a < config.min_initial_deposit or amount_b < config.min_initial_deposit
    ):
        raise InitialDepositTooSmall(
            f"First deposit needs at least {config.min_initial_deposit} of each asset, "
            f"got {amount_a} / {amount_b}"
        )

    amp = get_current_amplification(pool, now)
    old_a, old_b = pool.balance_a, pool.balance_b
    d0 = calculate_d(old_a, old_b, amp)

    new_a = (S(old_a) + amount_a).to_u64()
    new_b = (S(old_b) + amount_b).to_u64()
    d1 = calculate_d(new_a, new_b, amp)
    # An empty side pins D at zero, so D cannot price the shares
    face_value = not first_deposit and d0 == 0
    if d1 <= d0 and not face_value:
        raise InvariantViolation(f"Invariant did not increase: D0={d0}, D1={d1}")

    if face_value:
        total = S(old_a) + old_b
        if total == 0:
            raise InsufficientLiquidity(f"Pool {pool.pool_id} has LP outstanding but no balances")
        lp_minted = ((S(amount_a) + amount_b) * pool.lp_supply // total).to_u64()
        result = AddLiquidityResult(lp_minted=lp_minted, d0=d0, d1=d1)
        new_lp_supply = (S(pool.lp_supply) + lp_minted).to_u64()
    elif first_deposit:
        try:
            lp_minted = (S(d1) - MINIMUM_LIQUIDITY).to_u64()
        except Underflow as err:
            raise InsufficientLiquidity(f"Initial invariant {d1} below minimum liquidity") from err
        result = AddLiquidityResult(lp_minted=lp_minted, d0=d0, d1=d1, first_deposit=True)
        new_lp_supply = (S(MINIMUM_LIQUIDITY) + lp_minted).to_u64()
    else:
        lp_minted = ((S(d1) - d0) * pool.lp_supply // d0).to_u64()
        fee_a = _imbalance_fee(old_a, new_a, d0, d1, pool.swap_fee_bps)
        fee_b = _imbalance_fee(old_b, new_b, d0, d1, pool.swap_fee_bps)
        result = AddLiquidityResult(
            lp_minted=lp_minted,
            d0=d0,
            d1=d1,
            imbalance_fee_a=fee_a,
            imbalance_fee_b=fee_b,
            admin_fee_a=_admin_share(fee_a, pool.admin_fee_percent),
            admin_fee_b=_admin_share(fee_b, pool.admin_fee_percent),
        )
        new_lp_supply = (S(pool.lp_supply) + lp_minted).to_u64()

    if lp_minted < min_lp:
        raise SlippageExceeded(f"LP minted {lp_minted} below minimum {min_lp}")
    if lp_minted == 0:
        raise AmountTooSmall("Deposit too small to mint LP tokens")

    new_admin_a = (S(pool.admin_fees_a) + result.admin_fee_a).to_u64()
    new_admin_b = (S(pool.admin_fees_b) + result.admin_fee_b).to_u64()

    pool.balance_a = new_a
    pool.balance_b = new_b
    pool.lp_supply = new_lp_supply
    pool.admin_fees_a = new_admin_a
    pool.admin_fees_b = new_admin_b

    logger.info(
        "liquidity_added",
        pool_id=pool.pool_id,
        amount_a=amount_a,
        amount_b=amount_b,
        lp_minted=lp_minted,
        first_deposit=first_deposit,
        d0=d0,
        d1=d1,
    )
    return result


def exit_fee_bps(pool: Pool) -> int:
    """Withdrawal fee rate: 0 at 50/50, the full swap fee at total imbalance."""
    total = S(pool.balance_a) + pool.balance_b
    if total == 0:
        return 0
    ratio_bps = (S(pool.balance_a) * BPS_DENOMINATOR // total).value
    imbalance_bps = abs(ratio_bps - BALANCED_RATIO_BPS)
    return (S(pool.swap_fee_bps) * imbalance_bps // BALANCED_RATIO_BPS).value


def remove_liquidity(
    pool: Pool,
    lp_amount: int,
    min_a: int,
    min_b: int,
) -> RemoveLiquidityResult:
    """Burn LP tokens for a proportional share of both assets.

    Always allowed, even when the pool is paused. The exit fee stays in the
    vault; its admin share is credited to the fee accumulators.

    Raises:
        ZeroAmount: lp_amount is zero
        InsufficientLiquidity: Withdrawal would take the supply below MINIMUM_LIQUIDITY
        SlippageExceeded: An output is below the caller's minimum
        MathOverflow: Arithmetic overflow
    """
    require_u64("lp_amount", lp_amount)
    require_u64("min_a", min_a)
    require_u64("min_b", min_b)
    if lp_amount == 0:
        raise ZeroAmount("LP amount must be positive")
    if lp_amount >= pool.lp_supply:
        raise InsufficientLiquidity(f"LP amount {lp_amount} >= supply {pool.lp_supply}")
    remaining = pool.lp_supply - lp_amount
    if remaining < MINIMUM_LIQUIDITY:
        raise InsufficientLiquidity(f"Remaining supply {remaining} below minimum liquidity")

    gross_a = (S(pool.balance_a) * lp_amount // pool.lp_supply).value
    gross_b = (S(pool.balance_b) * lp_amount // pool.lp_supply).value

    fee_bps = exit_fee_bps(pool)
    fee_a = (S(gross_a) * fee_bps // BPS_DENOMINATOR).value
    fee_b = (S(gross_b) * fee_bps // BPS_DENOMINATOR).value
    amount_a = gross_a - fee_a
    amount_b = gross_b - fee_b

    if amount_a < min_a:
        raise SlippageExceeded(f"Asset A out {amount_a} below minimum {min_a}")
    if amount_b < min_b:
        raise SlippageExceeded(f"Asset B out {amount_b} below minimum {min_b}")

    admin_a = _admin_share(fee_a, pool.admin_fee_percent)
    admin_b = _admin_share(fee_b, pool.admin_fee_percent)
    new_admin_a = (S(pool.admin_fees_a) + admin_a).to_u64()
    new_admin_b = (S(pool.admin_fees_b) + admin_b).to_u64()

    pool.lp_supply = remaining
    pool.balance_a = (S(pool.balance_a) - gross_a).value
    pool.balance_b = (S(pool.balance_b) - gross_b).value
    pool.admin_fees_a = new_admin_a
    pool.admin_fees_b = new_admin_b

    logger.info(
        "liquidity_removed",
        pool_id=pool.pool_id,
        lp_amount=lp_amount,
        amount_a=amount_a,
        amount_b=amount_b,
        exit_fee_bps=fee_bps,
    )
    return RemoveLiquidityResult(
        amount_a=amount_a,
        amount_b=amount_b,
        gross_a=gross_a,
        gross_b=gross_b,
        fee_a=fee_a,
        fee_b=fee_b,
        admin_fee_a=admin_a,
        admin_fee_b=admin_b,
        effective_fee_bps=fee_bps,
    )
