"""Pre-mutation checks shared by the liquidity, swap and migration paths.

Every check here raises before any state is touched, so an operation that
fails a guard leaves the pool exactly as it found it.
"""

from stableswap.constants import BPS_DENOMINATOR
from stableswap.errors import (
    MathOverflow,
    PoolPaused,
    SlippageTooHigh,
    TransactionExpired,
    VaultBalanceMismatch,
)
from stableswap.safe_int import U64_MAX, S
from stableswap.state import Pool, VaultHoldings


def require_u64(name: str, value: int) -> int:
    """Validate that a caller-supplied amount fits an unsigned 64-bit slot."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise MathOverflow(f"{name} out of u64 range: {value}")
    return value


def require_not_paused(pool: Pool) -> None:
    if pool.paused:
        raise PoolPaused(f"Pool {pool.pool_id} is paused")


def require_deadline(deadline: int, now: int) -> None:
    if now > deadline:
        raise TransactionExpired(f"Deadline {deadline} passed (now={now})")


def require_vault_consistency(pool: Pool, vault: VaultHoldings) -> None:
    """Reject when either vault holds less than the pool's tracked balance.

    A shortfall means the internal accounting can no longer be trusted;
    surpluses (donations, unwithdrawn fees) are tolerated.
    """
    if vault.a < pool.balance_a:
        raise VaultBalanceMismatch(f"Vault A holds {vault.a} < tracked {pool.balance_a}")
    if vault.b < pool.balance_b:
        raise VaultBalanceMismatch(f"Vault B holds {vault.b} < tracked {pool.balance_b}")


def slippage_floor(reference: int, max_slippage_bps: int) -> int:
    """Smallest acceptable minimum for an operation expected to yield `reference`."""
    return (S(reference) * (BPS_DENOMINATOR - max_slippage_bps) // BPS_DENOMINATOR).value


def require_slippage_floor(minimum: int, reference: int, max_slippage_bps: int) -> None:
    """Reject a caller minimum that tolerates more than `max_slippage_bps`.

    Protects callers who pass min_out=0 from unbounded extraction.
    """
    floor = slippage_floor(reference, max_slippage_bps)
    if minimum < floor:
        raise SlippageTooHigh(f"Minimum {minimum} below slippage floor {floor}")
