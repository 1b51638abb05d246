"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool

    pool = make_pool(balance_a=SEED, balance_b=SEED, lp_supply=2 * SEED)
"""

from stableswap.state import FarmingPeriod, Pool, VaultHoldings
from tests.helpers.constants import AUTHORITY, USDC, USDT


def make_pool(
    balance_a: int = 0,
    balance_b: int = 0,
    lp_supply: int = 0,
    amplification: int = 100,
    swap_fee_bps: int = 4,
    admin_fee_percent: int = 50,
    pool_id: int = 1,
    **overrides,
) -> Pool:
    """Create a pool record with vaults assigned and sensible defaults.

    Args:
        balance_a: Tracked balance of asset A
        balance_b: Tracked balance of asset B
        lp_supply: Outstanding LP supply
        amplification: Flat amplification (no ramp)
        swap_fee_bps: Trading fee
        admin_fee_percent: Admin share of fees
        pool_id: Pool handle
        **overrides: Any other Pool field

    Returns:
        Pool ready for the operation modules
    """
    fields = {
        "pool_id": pool_id,
        "authority": AUTHORITY,
        "asset_a": USDC,
        "asset_b": USDT,
        "lp_asset": f"pool/{pool_id}/lp",
        "vault_a": f"pool/{pool_id}/vault_a",
        "vault_b": f"pool/{pool_id}/vault_b",
        "amplification": amplification,
        "initial_amplification": amplification,
        "target_amplification": amplification,
        "swap_fee_bps": swap_fee_bps,
        "admin_fee_percent": admin_fee_percent,
        "balance_a": balance_a,
        "balance_b": balance_b,
        "lp_supply": lp_supply,
    }
    fields.update(overrides)
    return Pool(**fields)


def holdings(pool: Pool, extra_a: int = 0, extra_b: int = 0) -> VaultHoldings:
    """Vault holdings that exactly cover the pool, plus an optional surplus."""
    return VaultHoldings(a=pool.balance_a + extra_a, b=pool.balance_b + extra_b)


def make_farm(
    start_time: int,
    end_time: int,
    reward_per_second: int = 10,
    farm_id: int = 1,
    pool_id: int = 1,
) -> FarmingPeriod:
    """Create a farming period whose accumulator starts at start_time."""
    return FarmingPeriod(
        farm_id=farm_id,
        pool_id=pool_id,
        reward_asset="reward",
        start_time=start_time,
        end_time=end_time,
        reward_per_second=reward_per_second,
        total_rewards=reward_per_second * (end_time - start_time),
        reward_account=f"farm/{farm_id}/rewards",
        stake_account=f"farm/{farm_id}/stake",
        last_update_time=start_time,
    )
