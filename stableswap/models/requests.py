"""Request bodies for the pool HTTP API."""

from typing import Literal

from pydantic import BaseModel, Field

from stableswap.models.types import Amount, Identity
from stableswap.state import SwapDirection


class CreatePoolRequest(BaseModel):
    """Create a pool and initialize its vaults in one call."""

    authority: Identity
    asset_a: str = Field(alias="assetA", min_length=1)
    asset_b: str = Field(alias="assetB", min_length=1)
    amplification: int = Field(description="Initial amplification coefficient")

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    amount_in: Amount = Field(alias="amountIn")
    direction: SwapDirection
    kind: Literal["swap", "migration"] = "swap"

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Execute a curve swap, or a flat-fee migration when kind is "migration"."""

    caller: Identity
    amount_in: Amount = Field(alias="amountIn")
    min_amount_out: Amount = Field(alias="minAmountOut")
    deadline: int = Field(description="Last unix second at which the trade may execute")
    direction: SwapDirection
    kind: Literal["swap", "migration"] = "swap"

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    caller: Identity
    amount_a: Amount = Field(default=0, alias="amountA")
    amount_b: Amount = Field(default=0, alias="amountB")
    min_lp: Amount = Field(default=0, alias="minLp")

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    caller: Identity
    lp_amount: Amount = Field(alias="lpAmount")
    min_a: Amount = Field(default=0, alias="minA")
    min_b: Amount = Field(default=0, alias="minB")

    model_config = {"populate_by_name": True}
