"""Pool configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool limits and timelocks.

    This dataclass holds every tunable limit the pool enforces, making it
    easy to test with different configurations and ensuring consistency
    across the engine.

    Attributes:
        default_swap_fee_bps: Trading fee charged by new pools (default: 4 = 0.04%)
        max_swap_fee_bps: Upper bound accepted by update_swap_fee (default: 100 = 1%)
        admin_fee_percent: Admin's share of every fee, in percent (default: 50)
        min_swap_amount: Dust threshold for swaps and migrations (default: 100_000)
        min_initial_deposit: Per-asset floor for the first deposit (default: 100_000_000)
        max_slippage_bps: Largest slippage a caller may accept (default: 1000 = 10%)
        min_ramp_duration: Shortest amplification ramp in seconds (default: 1 day)
        max_amp_change: Largest ratio between current and target amplification (default: 10)
        amp_commit_delay: Seconds between ramp commit and reveal (default: 1 hour)
        authority_timelock: Seconds before a pending authority can accept (default: 48 hours)
        min_farming_duration: Shortest farming window in seconds (default: 1 day)
    """

    # Fees
    default_swap_fee_bps: int = 4
    max_swap_fee_bps: int = 100
    admin_fee_percent: int = 50

    # Amount floors
    min_swap_amount: int = 100_000
    min_initial_deposit: int = 100_000_000
    max_slippage_bps: int = 1_000

    # Amplification ramping
    min_ramp_duration: int = 86_400
    max_amp_change: int = 10
    amp_commit_delay: int = 3_600

    # Governance
    authority_timelock: int = 172_800

    # Farming
    min_farming_duration: int = 86_400


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
