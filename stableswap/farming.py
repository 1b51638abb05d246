"""Time-based LP staking rewards.

Rewards stream at a fixed rate between start_time and end_time and are
split pro rata by a reward-per-share accumulator:

    acc += reward_per_second * elapsed * ACC_REWARD_PRECISION / total_staked
    pending = lp_staked * acc / ACC_REWARD_PRECISION - reward_debt

Every stake change first settles the accumulator and banks the position's
pending rewards, then resets reward_debt against the new stake.
"""

from __future__ import annotations

import structlog

from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import ACC_REWARD_PRECISION
from stableswap.errors import (
    FarmingEnded,
    FarmingNotStarted,
    FarmingPeriodTooShort,
    InsufficientStake,
    InvalidFarmingPeriod,
    NoRewardsToClaim,
    ZeroAmount,
)
from stableswap.guards import require_u64
from stableswap.safe_int import S
from stableswap.state import FarmingPeriod, UserFarmingPosition

logger = structlog.get_logger()


def create_farming_period(
    farm_id: int,
    pool_id: int,
    reward_asset: str,
    start_time: int,
    end_time: int,
    total_rewards: int,
    now: int,
    *,
    reward_account: str,
    stake_account: str,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> FarmingPeriod:
    """Build a new farming period paying `total_rewards` over [start, end).

    Raises:
        ZeroAmount: total_rewards is zero
        InvalidFarmingPeriod: end <= start, start in the past, or a zero rate
        FarmingPeriodTooShort: Window shorter than min_farming_duration
    """
    require_u64("total_rewards", total_rewards)
    if total_rewards == 0:
        raise ZeroAmount("Farming rewards must be positive")
    if end_time <= start_time:
        raise InvalidFarmingPeriod(f"End {end_time} not after start {start_time}")
    if start_time < now:
        raise InvalidFarmingPeriod(f"Start {start_time} is in the past (now={now})")

    duration = end_time - start_time
    if duration < config.min_farming_duration:
        raise FarmingPeriodTooShort(
            f"Duration {duration}s below minimum {config.min_farming_duration}s"
        )

    reward_per_second = total_rewards // duration
    if reward_per_second == 0:
        raise InvalidFarmingPeriod(f"{total_rewards} rewards over {duration}s rounds to a zero rate")

    return FarmingPeriod(
        farm_id=farm_id,
        pool_id=pool_id,
        reward_asset=reward_asset,
        start_time=start_time,
        end_time=end_time,
        reward_per_second=reward_per_second,
        total_rewards=total_rewards,
        reward_account=reward_account,
        stake_account=stake_account,
        last_update_time=start_time,
    )


def update_period(period: FarmingPeriod, now: int) -> None:
    """Advance the accumulator to `now`, capped at the period's end."""
    if now < period.start_time:
        return
    current = min(now, period.end_time)
    if current <= period.last_update_time:
        return

    elapsed = current - period.last_update_time
    if period.total_staked == 0:
        period.last_update_time = current
        return

    rewards = S(period.reward_per_second) * elapsed
    period.acc_reward_per_share = (
        S(period.acc_reward_per_share) + rewards * ACC_REWARD_PRECISION // period.total_staked
    ).value
    period.distributed_rewards = (S(period.distributed_rewards) + rewards).value
    period.last_update_time = current


def _accrued(period: FarmingPeriod, lp_staked: int) -> int:
    return (S(lp_staked) * period.acc_reward_per_share // ACC_REWARD_PRECISION).value


def _bank(period: FarmingPeriod, position: UserFarmingPosition) -> None:
    # reward_debt can exceed accrued after rounding; never go negative
    earned = S(_accrued(period, position.lp_staked)).saturating_sub(position.reward_debt)
    position.pending_rewards = (S(position.pending_rewards) + earned).value


def pending_rewards(period: FarmingPeriod, position: UserFarmingPosition, now: int) -> int:
    """Rewards `position` could claim at `now`, without mutating anything."""
    acc = S(period.acc_reward_per_share)
    current = min(now, period.end_time)
    if now >= period.start_time and current > period.last_update_time and period.total_staked > 0:
        elapsed = current - period.last_update_time
        acc = acc + S(period.reward_per_second) * elapsed * ACC_REWARD_PRECISION // period.total_staked
    accrued = S(position.lp_staked) * acc // ACC_REWARD_PRECISION
    return (accrued.saturating_sub(position.reward_debt) + position.pending_rewards).value


def stake(period: FarmingPeriod, position: UserFarmingPosition, amount: int, now: int) -> None:
    """Add `amount` LP to the position.

    Raises:
        ZeroAmount: amount is zero
        FarmingNotStarted: now is before start_time
        FarmingEnded: now is at or after end_time
    """
    require_u64("amount", amount)
    if amount == 0:
        raise ZeroAmount("Stake amount must be positive")
    if now < period.start_time:
        raise FarmingNotStarted(f"Farm {period.farm_id} starts at {period.start_time}")
    if now >= period.end_time:
        raise FarmingEnded(f"Farm {period.farm_id} ended at {period.end_time}")

    update_period(period, now)
    _bank(period, position)

    position.lp_staked = (S(position.lp_staked) + amount).to_u64()
    period.total_staked = (S(period.total_staked) + amount).to_u64()
    position.reward_debt = _accrued(period, position.lp_staked)

    logger.info(
        "lp_staked",
        farm_id=period.farm_id,
        owner=position.owner,
        amount=amount,
        total_staked=period.total_staked,
    )


def unstake(period: FarmingPeriod, position: UserFarmingPosition, amount: int, now: int) -> None:
    """Remove `amount` LP from the position. Allowed at any time.

    Raises:
        ZeroAmount: amount is zero
        InsufficientStake: amount exceeds the position's stake
    """
    require_u64("amount", amount)
    if amount == 0:
        raise ZeroAmount("Unstake amount must be positive")
    if amount > position.lp_staked:
        raise InsufficientStake(f"Unstake {amount} exceeds stake {position.lp_staked}")

    update_period(period, now)
    _bank(period, position)

    position.lp_staked -= amount
    period.total_staked -= amount
    position.reward_debt = _accrued(period, position.lp_staked)

    logger.info(
        "lp_unstaked",
        farm_id=period.farm_id,
        owner=position.owner,
        amount=amount,
        total_staked=period.total_staked,
    )


def claim(period: FarmingPeriod, position: UserFarmingPosition, now: int) -> int:
    """Settle and zero the position's pending rewards.

    Returns:
        Amount of reward asset owed to the owner

    Raises:
        NoRewardsToClaim: Nothing has accrued
    """
    update_period(period, now)
    _bank(period, position)
    position.reward_debt = _accrued(period, position.lp_staked)

    amount = position.pending_rewards
    if amount == 0:
        raise NoRewardsToClaim(f"No rewards for {position.owner} in farm {period.farm_id}")
    position.pending_rewards = 0

    logger.info("farming_rewards_claimed", farm_id=period.farm_id, owner=position.owner, amount=amount)
    return amount
