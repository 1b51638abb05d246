"""Response bodies for the pool HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from stableswap.amplification import get_current_amplification
from stableswap.migration import MigrationResult
from stableswap.models.types import Amount
from stableswap.state import Pool, RampPhase, SwapDirection
from stableswap.swap import SwapResult


class PoolResponse(BaseModel):
    """Public view of a pool record at a point in time."""

    pool_id: int = Field(alias="poolId")
    authority: str
    asset_a: str = Field(alias="assetA")
    asset_b: str = Field(alias="assetB")
    lp_asset: str = Field(alias="lpAsset")
    vault_a: str | None = Field(default=None, alias="vaultA")
    vault_b: str | None = Field(default=None, alias="vaultB")
    balance_a: Amount = Field(alias="balanceA")
    balance_b: Amount = Field(alias="balanceB")
    lp_supply: Amount = Field(alias="lpSupply")
    amplification: int = Field(description="Amplification in effect now")
    target_amplification: int = Field(alias="targetAmplification")
    ramp_start_time: int = Field(alias="rampStartTime")
    ramp_stop_time: int = Field(alias="rampStopTime")
    ramp_phase: RampPhase = Field(alias="rampPhase")
    swap_fee_bps: int = Field(alias="swapFeeBps")
    admin_fee_percent: int = Field(alias="adminFeePercent")
    admin_fees_a: Amount = Field(alias="adminFeesA")
    admin_fees_b: Amount = Field(alias="adminFeesB")
    total_volume_a: int = Field(alias="totalVolumeA")
    total_volume_b: int = Field(alias="totalVolumeB")
    trade_count: int = Field(alias="tradeCount")
    paused: bool
    pending_authority: str | None = Field(default=None, alias="pendingAuthority")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: Pool, now: int) -> PoolResponse:
        return cls(
            pool_id=pool.pool_id,
            authority=pool.authority,
            asset_a=pool.asset_a,
            asset_b=pool.asset_b,
            lp_asset=pool.lp_asset,
            vault_a=pool.vault_a,
            vault_b=pool.vault_b,
            balance_a=pool.balance_a,
            balance_b=pool.balance_b,
            lp_supply=pool.lp_supply,
            amplification=get_current_amplification(pool, now),
            target_amplification=pool.target_amplification,
            ramp_start_time=pool.ramp_start_time,
            ramp_stop_time=pool.ramp_stop_time,
            ramp_phase=pool.ramp_phase(now),
            swap_fee_bps=pool.swap_fee_bps,
            admin_fee_percent=pool.admin_fee_percent,
            admin_fees_a=pool.admin_fees_a,
            admin_fees_b=pool.admin_fees_b,
            total_volume_a=pool.total_volume_a,
            total_volume_b=pool.total_volume_b,
            trade_count=pool.trade_count,
            paused=pool.paused,
            pending_authority=pool.pending_authority,
        )


class QuoteResponse(BaseModel):
    """Priced trade. `gross_amount_out` and `amplification` are None for migrations."""

    direction: SwapDirection
    amount_in: Amount = Field(alias="amountIn")
    amount_out: Amount = Field(alias="amountOut")
    fee: Amount
    admin_fee: Amount = Field(alias="adminFee")
    gross_amount_out: Amount | None = Field(default=None, alias="grossAmountOut")
    amplification: int | None = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_swap(cls, result: SwapResult) -> QuoteResponse:
        return cls(
            direction=result.direction,
            amount_in=result.amount_in,
            amount_out=result.amount_out,
            fee=result.fee,
            admin_fee=result.admin_fee,
            gross_amount_out=result.gross_amount_out,
            amplification=result.amplification,
        )

    @classmethod
    def from_migration(cls, result: MigrationResult, direction: SwapDirection) -> QuoteResponse:
        return cls(
            direction=direction,
            amount_in=result.amount_in,
            amount_out=result.amount_out,
            fee=result.fee,
            admin_fee=result.admin_fee,
        )


class SwapResponse(BaseModel):
    amount_out: Amount = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    lp_minted: Amount = Field(alias="lpMinted")

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amount_a: Amount = Field(alias="amountA")
    amount_b: Amount = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Body returned for every engine error."""

    error: str = Field(description="Error class name")
    code: int = Field(description="Numeric error code")
    detail: str
