"""Flat-fee 1:1 conversion between the two assets, and single-sided deposits.

Migration ignores the curve entirely: the caller gets `amount_in` back less a
fixed 0.1337% fee. It exists for moving between two representations of the
same underlying asset, where pricing off the invariant would only add
slippage.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import (
    MIGRATION_FEE_DENOMINATOR,
    MIGRATION_FEE_NUMERATOR,
    MINIMUM_LIQUIDITY,
    PERCENT_DENOMINATOR,
)
from stableswap.errors import (
    AmountTooSmall,
    InitialDepositTooSmall,
    InsufficientLiquidity,
    SlippageExceeded,
    ZeroAmount,
)
from stableswap.guards import (
    require_deadline,
    require_not_paused,
    require_slippage_floor,
    require_u64,
    require_vault_consistency,
)
from stableswap.safe_int import S
from stableswap.state import Pool, Side, SwapDirection, VaultHoldings

logger = structlog.get_logger()


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of a 1:1 migration.

    Attributes:
        amount_in: Amount of the input asset taken from the caller
        fee: Migration fee, 1337 parts per million of amount_in
        admin_fee: Admin share of the fee
        amount_out: Amount of the other asset paid to the caller
    """

    amount_in: int
    fee: int
    admin_fee: int
    amount_out: int


@dataclass(frozen=True)
class SingleSidedDepositResult:
    """Outcome of a one-asset deposit.

    Attributes:
        side: Which asset was deposited
        amount: Amount deposited
        lp_minted: LP tokens owed to the depositor
        first_deposit: True if this deposit seeded the pool
    """

    side: Side
    amount: int
    lp_minted: int
    first_deposit: bool


def quote_migration(amount_in: int, admin_fee_percent: int) -> MigrationResult:
    """Fee split for migrating `amount_in`."""
    require_u64("amount_in", amount_in)
    fee = (S(amount_in) * MIGRATION_FEE_NUMERATOR // MIGRATION_FEE_DENOMINATOR).value
    admin_fee = (S(fee) * admin_fee_percent // PERCENT_DENOMINATOR).value
    return MigrationResult(
        amount_in=amount_in,
        fee=fee,
        admin_fee=admin_fee,
        amount_out=amount_in - fee,
    )


def migrate(
    pool: Pool,
    amount_in: int,
    min_amount_out: int,
    deadline: int,
    direction: SwapDirection,
    *,
    vault: VaultHoldings,
    now: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> MigrationResult:
    """Convert one asset into the other at 1:1 minus the migration fee.

    Runs the same pre-checks as a swap. The output side's tracked balance
    drops by the net amount, so the admin share of the fee is only
    withdrawable once the vault holds a matching surplus.

    Raises:
        PoolPaused: Pool is paused
        AmountTooSmall: amount_in below min_swap_amount
        TransactionExpired: now is past the deadline
        VaultBalanceMismatch: A vault holds less than its tracked balance
        SlippageTooHigh: min_amount_out tolerates more than max_slippage_bps
        SlippageExceeded: Net output below min_amount_out
        InsufficientLiquidity: Output exceeds the pool balance
    """
    require_u64("amount_in", amount_in)
    require_u64("min_amount_out", min_amount_out)
    require_not_paused(pool)
    if amount_in < config.min_swap_amount:
        raise AmountTooSmall(f"Migration amount {amount_in} below minimum {config.min_swap_amount}")
    require_deadline(deadline, now)
    require_vault_consistency(pool, vault)
    require_slippage_floor(min_amount_out, amount_in, config.max_slippage_bps)

    result = quote_migration(amount_in, pool.admin_fee_percent)

    side_in, side_out = direction.side_in, direction.side_out
    balance_out = pool.balance(side_out)
    if result.amount_out < min_amount_out:
        raise SlippageExceeded(f"Output {result.amount_out} below minimum {min_amount_out}")
    if result.amount_out > balance_out:
        raise InsufficientLiquidity(f"Output {result.amount_out} exceeds balance {balance_out}")

    new_in = (S(pool.balance(side_in)) + amount_in).to_u64()
    new_admin = (S(pool.admin_fees(side_out)) + result.admin_fee).to_u64()

    pool.set_balance(side_in, new_in)
    pool.set_balance(side_out, balance_out - result.amount_out)
    pool.set_admin_fees(side_out, new_admin)
    pool.add_volume(side_in, amount_in)
    pool.trade_count += 1

    logger.info(
        "migration_executed",
        pool_id=pool.pool_id,
        direction=direction.value,
        amount_in=amount_in,
        amount_out=result.amount_out,
        fee=result.fee,
    )
    return result


def add_liquidity_single_sided(
    pool: Pool,
    amount: int,
    side: Side,
    min_lp: int,
    *,
    vault: VaultHoldings,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> SingleSidedDepositResult:
    """Deposit one asset and mint LP at face value.

    LP is priced as `amount * lp_supply / (balance_a + balance_b)`, treating
    both assets as worth the same. A deposit into an empty pool seeds it and
    locks MINIMUM_LIQUIDITY.

    Raises:
        PoolPaused: Pool is paused
        ZeroAmount: amount is zero
        VaultBalanceMismatch: A vault holds less than its tracked balance
        InitialDepositTooSmall: Seeding deposit below min_initial_deposit
        InsufficientLiquidity: Pool has LP outstanding but no balances
        SlippageTooHigh: min_lp tolerates more than max_slippage_bps
        SlippageExceeded: Minted LP below min_lp
        AmountTooSmall: Deposit too small to mint any LP
    """
    require_u64("amount", amount)
    require_u64("min_lp", min_lp)
    require_not_paused(pool)
    if amount == 0:
        raise ZeroAmount("Deposit amount must be positive")
    require_vault_consistency(pool, vault)

    first_deposit = pool.lp_supply == 0
    if first_deposit:
        if amount < config.min_initial_deposit:
            raise InitialDepositTooSmall(
                f"First deposit needs at least {config.min_initial_deposit}, got {amount}"
            )
        lp_minted = amount - MINIMUM_LIQUIDITY
        new_lp_supply = (S(MINIMUM_LIQUIDITY) + lp_minted).to_u64()
    else:
        total = S(pool.balance_a) + pool.balance_b
        if total == 0:
            raise InsufficientLiquidity(f"Pool {pool.pool_id} has LP outstanding but no balances")
        lp_minted = (S(amount) * pool.lp_supply // total).to_u64()
        new_lp_supply = (S(pool.lp_supply) + lp_minted).to_u64()

    require_slippage_floor(min_lp, lp_minted, config.max_slippage_bps)
    if lp_minted < min_lp:
        raise SlippageExceeded(f"LP minted {lp_minted} below minimum {min_lp}")
    if lp_minted == 0:
        raise AmountTooSmall("Deposit too small to mint LP tokens")

    pool.set_balance(side, (S(pool.balance(side)) + amount).to_u64())
    pool.lp_supply = new_lp_supply

    logger.info(
        "single_sided_liquidity_added",
        pool_id=pool.pool_id,
        side=side.value,
        amount=amount,
        lp_minted=lp_minted,
        first_deposit=first_deposit,
    )
    return SingleSidedDepositResult(
        side=side, amount=amount, lp_minted=lp_minted, first_deposit=first_deposit
    )
