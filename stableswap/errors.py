"""StableSwap error classes.

Every error carries the numeric code of the on-chain program's error table
(6000-based) so API clients can match on either the name or the code.
"""


class StableSwapError(Exception):
    """Base error for pool operations."""

    code: int = 6000


class MathOverflow(StableSwapError, ArithmeticError):
    """Error 6001: Checked arithmetic overflowed, underflowed or divided by zero."""

    code = 6001


class SlippageExceeded(StableSwapError):
    """Error 6002: Output is below the caller's minimum."""

    code = 6002


class InsufficientLiquidity(StableSwapError):
    """Error 6003: Pool (or stake) cannot cover the requested amount."""

    code = 6003


class InsufficientStake(InsufficientLiquidity):
    """Unstake amount exceeds the position's staked LP."""

    pass


class PoolPaused(StableSwapError):
    """Error 6004: Pool is paused."""

    code = 6004


class Unauthorized(StableSwapError):
    """Error 6005: Caller is not allowed to perform this operation."""

    code = 6005


class ZeroAmount(StableSwapError):
    """Error 6006: Amount must be positive."""

    code = 6006


class InvariantViolation(StableSwapError):
    """Error 6007: Invariant D did not increase on deposit."""

    code = 6007


class ConvergenceFailed(StableSwapError):
    """Error 6008: Newton iteration did not converge within 255 steps."""

    code = 6008


class InvalidAmplification(StableSwapError):
    """Error 6009: Amplification outside [MIN_AMPLIFICATION, MAX_AMPLIFICATION]."""

    code = 6009


class FeeTooHigh(StableSwapError):
    """Error 6010: Swap fee above the configured maximum."""

    code = 6010


class NoFeesToWithdraw(StableSwapError):
    """Error 6011: No withdrawable admin fees."""

    code = 6011


class InvalidAuthority(StableSwapError):
    """Error 6012: Proposed authority is empty."""

    code = 6012


class NoTransferPending(StableSwapError):
    """Error 6013: No authority transfer is pending."""

    code = 6013


class TimelockNotExpired(StableSwapError):
    """Error 6014: Authority transfer timelock still running."""

    code = 6014


class AmountTooSmall(StableSwapError):
    """Error 6015: Amount below the dust threshold."""

    code = 6015


class InitialDepositTooSmall(StableSwapError):
    """Error 6016: First deposit below the minimum on at least one side."""

    code = 6016


class TransactionExpired(StableSwapError):
    """Error 6017: Deadline has passed."""

    code = 6017


class RampTooFast(StableSwapError):
    """Error 6018: Ramp duration below the minimum."""

    code = 6018


class AmpChangeTooLarge(StableSwapError):
    """Error 6019: Target amplification more than 10x away from current."""

    code = 6019


class VaultBalanceMismatch(StableSwapError):
    """Error 6020: Vault holdings below tracked balance."""

    code = 6020


class SlippageTooHigh(StableSwapError):
    """Error 6021: Caller's minimum output is below the maximum-slippage floor."""

    code = 6021


class NoAmpCommitPending(StableSwapError):
    """Error 6022: Ramp revealed without a prior commit."""

    code = 6022


class AmpCommitDelayNotPassed(StableSwapError):
    """Error 6023: Ramp revealed before the commit delay elapsed."""

    code = 6023


class AmpCommitMismatch(StableSwapError):
    """Error 6024: Revealed ramp parameters do not match the commit hash."""

    code = 6024


class InvalidFarmingPeriod(StableSwapError):
    """Error 6025: Farming window or reward rate is invalid."""

    code = 6025


class FarmingNotStarted(StableSwapError):
    """Error 6026: Farming period has not started."""

    code = 6026


class FarmingEnded(StableSwapError):
    """Error 6027: Farming period is over."""

    code = 6027


class FarmingPeriodTooShort(StableSwapError):
    """Error 6028: Farming window shorter than the minimum duration."""

    code = 6028


class NoRewardsToClaim(StableSwapError):
    """Error 6029: Nothing accrued for this position."""

    code = 6029


class AlreadyInitialized(StableSwapError):
    """Error 6030: Pool vaults already initialized."""

    code = 6030


class PoolNotInitialized(StableSwapError):
    """Error 6031: Pool vaults not initialized yet."""

    code = 6031


class NotFoundError(StableSwapError):
    """Base error for unknown handles."""

    code = 6032


class PoolNotFound(NotFoundError):
    """No pool is registered under this handle."""

    pass


class FarmNotFound(NotFoundError):
    """No farming period is registered under this handle."""

    pass


class InsufficientFunds(StableSwapError):
    """Error 6033: Ledger account holds less than the requested amount."""

    code = 6033


class IdenticalAssets(StableSwapError):
    """Error 6034: A pool needs two distinct assets."""

    code = 6034
