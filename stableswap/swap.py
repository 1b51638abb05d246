"""Invariant-priced swaps.

The gross output is found by holding D constant; the trading fee is then
taken out of the output. Tracked balances drop by the gross amount, so the
fee stays behind in the vault and the admin's share of it is earmarked in
the output-side accumulator.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from stableswap.amplification import get_current_amplification
from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import BPS_DENOMINATOR, PERCENT_DENOMINATOR
from stableswap.errors import AmountTooSmall, InsufficientLiquidity, SlippageExceeded
from stableswap.guards import (
    require_deadline,
    require_not_paused,
    require_slippage_floor,
    require_u64,
    require_vault_consistency,
)
from stableswap.math.invariant import calculate_swap_output
from stableswap.safe_int import S
from stableswap.state import Pool, SwapDirection, VaultHoldings

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapResult:
    """Result of pricing a swap against a pool.

    Attributes:
        direction: Which asset was sold
        amount_in: Amount sold into the pool
        gross_amount_out: Output before the trading fee
        fee: Trading fee taken from the output
        admin_fee: Admin share of the fee
        amount_out: Amount paid to the caller
        amplification: Amplification used for pricing
    """

    direction: SwapDirection
    amount_in: int
    gross_amount_out: int
    fee: int
    admin_fee: int
    amount_out: int
    amplification: int


def quote_swap(pool: Pool, amount_in: int, direction: SwapDirection, now: int) -> SwapResult:
    """Price a swap without checking limits or touching the pool.

    Raises:
        InsufficientLiquidity: If either side of the pool is empty
        MathOverflow: Arithmetic overflow
    """
    require_u64("amount_in", amount_in)
    balance_in = pool.balance(direction.side_in)
    balance_out = pool.balance(direction.side_out)
    if balance_in == 0 or balance_out == 0:
        raise InsufficientLiquidity(f"Pool {pool.pool_id} has no liquidity")

    amp = get_current_amplification(pool, now)
    gross = calculate_swap_output(balance_in, balance_out, amount_in, amp)

    fee = (S(gross) * pool.swap_fee_bps // BPS_DENOMINATOR).value
    admin_fee = (S(fee) * pool.admin_fee_percent // PERCENT_DENOMINATOR).value

    return SwapResult(
        direction=direction,
        amount_in=amount_in,
        gross_amount_out=gross,
        fee=fee,
        admin_fee=admin_fee,
        amount_out=gross - fee,
        amplification=amp,
    )


def swap(
    pool: Pool,
    amount_in: int,
    min_amount_out: int,
    deadline: int,
    direction: SwapDirection,
    *,
    vault: VaultHoldings,
    now: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> SwapResult:
    """Execute a swap, updating tracked balances and admin fees.

    Args:
        pool: Pool to trade against
        amount_in: Amount of the input asset sold
        min_amount_out: Smallest acceptable net output
        deadline: Last unix second at which the swap may execute
        direction: Which asset is sold
        vault: Current ledger holdings of both vaults
        now: Current unix time
        config: Pool limits

    Returns:
        SwapResult; `amount_out` is what the caller receives

    Raises:
        PoolPaused: Pool is paused
        AmountTooSmall: amount_in below min_swap_amount
        TransactionExpired: now is past the deadline
        VaultBalanceMismatch: A vault holds less than its tracked balance
        SlippageTooHigh: min_amount_out tolerates more than max_slippage_bps
        SlippageExceeded: Net output below min_amount_out
        InsufficientLiquidity: Output exceeds the pool balance
        MathOverflow: Arithmetic overflow
    """
    require_u64("amount_in", amount_in)
    require_u64("min_amount_out", min_amount_out)
    require_not_paused(pool)
    if amount_in < config.min_swap_amount:
        raise AmountTooSmall(f"Swap amount {amount_in} below minimum {config.min_swap_amount}")
    require_deadline(deadline, now)
    require_vault_consistency(pool, vault)
    require_slippage_floor(min_amount_out, amount_in, config.max_slippage_bps)

    result = quote_swap(pool, amount_in, direction, now)

    side_in, side_out = direction.side_in, direction.side_out
    balance_out = pool.balance(side_out)
    if result.amount_out < min_amount_out:
        raise SlippageExceeded(f"Output {result.amount_out} below minimum {min_amount_out}")
    if result.amount_out > balance_out:
        raise InsufficientLiquidity(f"Output {result.amount_out} exceeds balance {balance_out}")

    new_in = (S(pool.balance(side_in)) + amount_in).to_u64()
    new_out = (S(balance_out) - result.gross_amount_out).value
    new_admin = (S(pool.admin_fees(side_out)) + result.admin_fee).to_u64()

    pool.set_balance(side_in, new_in)
    pool.set_balance(side_out, new_out)
    pool.set_admin_fees(side_out, new_admin)
    pool.add_volume(side_in, amount_in)
    pool.trade_count += 1

    logger.info(
        "swap_executed",
        pool_id=pool.pool_id,
        direction=direction.value,
        amount_in=amount_in,
        amount_out=result.amount_out,
        fee=result.fee,
        amplification=result.amplification,
    )
    return result
