"""Authority-gated pool administration."""

from __future__ import annotations

import structlog

from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.errors import (
    FeeTooHigh,
    InvalidAuthority,
    NoFeesToWithdraw,
    NoTransferPending,
    TimelockNotExpired,
    Unauthorized,
)
from stableswap.guards import require_u64
from stableswap.safe_int import S
from stableswap.state import Pool, VaultHoldings

logger = structlog.get_logger()


def require_authority(pool: Pool, caller: str) -> None:
    if caller != pool.authority:
        raise Unauthorized(f"{caller!r} is not the authority of pool {pool.pool_id}")


def update_swap_fee(pool: Pool, new_fee_bps: int, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
    require_u64("new_fee_bps", new_fee_bps)
    if new_fee_bps > config.max_swap_fee_bps:
        raise FeeTooHigh(f"Swap fee {new_fee_bps} bps above maximum {config.max_swap_fee_bps}")
    old_fee = pool.swap_fee_bps
    pool.swap_fee_bps = new_fee_bps
    logger.info("swap_fee_updated", pool_id=pool.pool_id, old_fee_bps=old_fee, new_fee_bps=new_fee_bps)


def set_paused(pool: Pool, paused: bool) -> None:
    pool.paused = paused
    logger.info("pool_paused" if paused else "pool_unpaused", pool_id=pool.pool_id)


def withdrawable_admin_fees(pool: Pool, vault: VaultHoldings) -> tuple[int, int]:
    """Admin fees that the vaults can actually cover.

    Each side is capped by the vault's surplus over the tracked balance so a
    withdrawal can never eat into LP-owned funds.
    """
    surplus_a = S(vault.a).saturating_sub(pool.balance_a)
    surplus_b = S(vault.b).saturating_sub(pool.balance_b)
    return (
        S(pool.admin_fees_a).min(surplus_a).value,
        S(pool.admin_fees_b).min(surplus_b).value,
    )


def withdraw_admin_fees(pool: Pool, vault: VaultHoldings) -> tuple[int, int]:
    """Release accumulated admin fees, capped by vault surplus.

    Returns:
        (amount_a, amount_b) to move from the vaults to the authority

    Raises:
        NoFeesToWithdraw: Nothing accrued, or no surplus to pay it from
    """
    if pool.admin_fees_a == 0 and pool.admin_fees_b == 0:
        raise NoFeesToWithdraw(f"Pool {pool.pool_id} has no admin fees")

    amount_a, amount_b = withdrawable_admin_fees(pool, vault)
    if amount_a == 0 and amount_b == 0:
        raise NoFeesToWithdraw(
            f"Pool {pool.pool_id} owes {pool.admin_fees_a}/{pool.admin_fees_b} "
            "but the vaults hold no surplus"
        )

    pool.admin_fees_a -= amount_a
    pool.admin_fees_b -= amount_b

    logger.info("admin_fees_withdrawn", pool_id=pool.pool_id, amount_a=amount_a, amount_b=amount_b)
    return amount_a, amount_b


def initiate_authority_transfer(pool: Pool, new_authority: str, now: int) -> None:
    """Propose `new_authority`; it can accept after the timelock."""
    if not new_authority:
        raise InvalidAuthority("New authority must be non-empty")
    pool.pending_authority = new_authority
    pool.authority_transfer_time = now
    logger.info(
        "authority_transfer_initiated",
        pool_id=pool.pool_id,
        current=pool.authority,
        pending=new_authority,
    )


def complete_authority_transfer(
    pool: Pool,
    caller: str,
    now: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> None:
    """Accept a pending transfer. Only the pending authority may call this.

    Raises:
        NoTransferPending: No transfer in progress
        Unauthorized: caller is not the pending authority
        TimelockNotExpired: authority_timelock has not elapsed
    """
    if pool.pending_authority is None or pool.authority_transfer_time is None:
        raise NoTransferPending(f"Pool {pool.pool_id} has no pending authority transfer")
    if caller != pool.pending_authority:
        raise Unauthorized(f"{caller!r} is not the pending authority of pool {pool.pool_id}")
    unlock = pool.authority_transfer_time + config.authority_timelock
    if now < unlock:
        raise TimelockNotExpired(f"Authority transfer unlocks at {unlock} (now={now})")

    previous = pool.authority
    pool.authority = pool.pending_authority
    pool.pending_authority = None
    pool.authority_transfer_time = None
    logger.info("authority_transferred", pool_id=pool.pool_id, previous=previous, current=pool.authority)


def cancel_authority_transfer(pool: Pool) -> None:
    if pool.pending_authority is None:
        raise NoTransferPending(f"Pool {pool.pool_id} has no pending authority transfer")
    pool.pending_authority = None
    pool.authority_transfer_time = None
    logger.info("authority_transfer_cancelled", pool_id=pool.pool_id)
