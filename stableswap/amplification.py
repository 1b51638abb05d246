"""Amplification ramping with a commit-reveal handshake.

Changing A reprices the whole curve, so it is never instantaneous:

1. commit_amp_ramp stores sha256(target || duration || salt)
2. after amp_commit_delay, ramp_amplification reveals the preimage and,
   if it matches, starts a linear ramp from the current value
3. get_current_amplification interpolates between the two ends

stop_ramp freezes A at whatever value is in effect.
"""

from __future__ import annotations

import hashlib
import hmac

import structlog

from stableswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from stableswap.constants import COMMIT_HASH_LENGTH, MAX_AMPLIFICATION, MIN_AMPLIFICATION
from stableswap.errors import (
    AmpChangeTooLarge,
    AmpCommitDelayNotPassed,
    AmpCommitMismatch,
    InvalidAmplification,
    NoAmpCommitPending,
    RampTooFast,
)
from stableswap.state import Pool

logger = structlog.get_logger()


def get_current_amplification(pool: Pool, now: int) -> int:
    """Amplification in effect at `now`.

    Returns the target outside a ramp window (or once it has ended), the
    initial value before it starts, and a linear interpolation inside it.
    Handles both increasing and decreasing ramps.
    """
    if pool.ramp_stop_time == 0 or now >= pool.ramp_stop_time:
        return pool.target_amplification
    if now <= pool.ramp_start_time:
        return pool.initial_amplification

    elapsed = now - pool.ramp_start_time
    duration = pool.ramp_stop_time - pool.ramp_start_time
    initial = pool.initial_amplification
    target = pool.target_amplification

    if target > initial:
        return initial + (target - initial) * elapsed // duration
    return initial - (initial - target) * elapsed // duration


def amp_commit_hash(target_amplification: int, ramp_duration: int, salt: bytes) -> bytes:
    """Commit hash for a ramp: sha256(target u64 LE || duration i64 LE || salt).

    Raises:
        InvalidAmplification: If target does not fit a u64
        RampTooFast: If duration does not fit an i64
    """
    try:
        target_bytes = target_amplification.to_bytes(8, "little")
    except OverflowError as err:
        raise InvalidAmplification(f"Target amplification out of range: {target_amplification}") from err
    try:
        duration_bytes = ramp_duration.to_bytes(8, "little", signed=True)
    except OverflowError as err:
        raise RampTooFast(f"Ramp duration out of range: {ramp_duration}") from err
    return hashlib.sha256(target_bytes + duration_bytes + bytes(salt)).digest()


def commit_amp_ramp(pool: Pool, commit_hash: bytes, now: int) -> None:
    """Phase 1: record the hash of the next ramp's parameters.

    A new commit replaces any pending one and restarts the delay.
    """
    if len(commit_hash) != COMMIT_HASH_LENGTH:
        raise AmpCommitMismatch(f"Commit hash must be {COMMIT_HASH_LENGTH} bytes, got {len(commit_hash)}")

    pool.pending_amp_commit = bytes(commit_hash)
    pool.amp_commit_time = now

    logger.info("amp_ramp_committed", pool_id=pool.pool_id, commit_time=now)


def ramp_amplification(
    pool: Pool,
    target_amplification: int,
    ramp_duration: int,
    salt: bytes,
    now: int,
    config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> int:
    """Phase 2: reveal the committed parameters and start the ramp.

    Args:
        pool: Pool to ramp
        target_amplification: Amplification at the end of the ramp
        ramp_duration: Ramp length in seconds
        salt: Salt used in the commit
        now: Current unix time
        config: Pool limits

    Returns:
        The amplification in effect when the ramp starts

    Raises:
        NoAmpCommitPending: No commit to reveal
        AmpCommitDelayNotPassed: Reveal before amp_commit_delay
        AmpCommitMismatch: Parameters do not hash to the commit
        InvalidAmplification: Target outside [MIN_AMPLIFICATION, MAX_AMPLIFICATION]
        RampTooFast: Duration below min_ramp_duration
        AmpChangeTooLarge: Target more than max_amp_change away from current
    """
    if pool.pending_amp_commit is None or pool.amp_commit_time is None:
        raise NoAmpCommitPending(f"Pool {pool.pool_id} has no pending amplification commit")
    if now < pool.amp_commit_time + config.amp_commit_delay:
        raise AmpCommitDelayNotPassed(
            f"Commit at {pool.amp_commit_time} can be revealed from "
            f"{pool.amp_commit_time + config.amp_commit_delay} (now={now})"
        )

    revealed = amp_commit_hash(target_amplification, ramp_duration, salt)
    if not hmac.compare_digest(revealed, pool.pending_amp_commit):
        raise AmpCommitMismatch("Revealed ramp parameters do not match the commit")

    if not MIN_AMPLIFICATION <= target_amplification <= MAX_AMPLIFICATION:
        raise InvalidAmplification(
            f"Target amplification {target_amplification} outside "
            f"[{MIN_AMPLIFICATION}, {MAX_AMPLIFICATION}]"
        )
    if ramp_duration < config.min_ramp_duration:
        raise RampTooFast(f"Ramp duration {ramp_duration}s below minimum {config.min_ramp_duration}s")

    current = get_current_amplification(pool, now)
    max_new = current * config.max_amp_change
    min_new = current // config.max_amp_change
    if not min_new <= target_amplification <= max_new:
        raise AmpChangeTooLarge(
            f"Target {target_amplification} outside [{min_new}, {max_new}] (current={current})"
        )

    pool.amplification = current
    pool.initial_amplification = current
    pool.target_amplification = target_amplification
    pool.ramp_start_time = now
    pool.ramp_stop_time = now + ramp_duration
    pool.pending_amp_commit = None
    pool.amp_commit_time = None

    logger.info(
        "amp_ramp_started",
        pool_id=pool.pool_id,
        initial=current,
        target=target_amplification,
        start=now,
        stop=now + ramp_duration,
    )
    return current


def stop_ramp(pool: Pool, now: int) -> int:
    """Freeze amplification at its current value and end any ramp.

    Returns:
        The frozen amplification
    """
    current = get_current_amplification(pool, now)

    pool.amplification = current
    pool.initial_amplification = current
    pool.target_amplification = current
    pool.ramp_start_time = 0
    pool.ramp_stop_time = 0

    logger.info("amp_ramp_stopped", pool_id=pool.pool_id, amplification=current)
    return current
