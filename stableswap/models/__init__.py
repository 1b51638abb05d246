"""Pydantic models for the pool HTTP API."""

from stableswap.models.requests import (
    AddLiquidityRequest,
    CreatePoolRequest,
    QuoteRequest,
    RemoveLiquidityRequest,
    SwapRequest,
)
from stableswap.models.responses import (
    AddLiquidityResponse,
    ErrorResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityResponse,
    SwapResponse,
)
from stableswap.models.types import Amount, Identity

__all__ = [
    # Types
    "Amount",
    "Identity",
    # Requests
    "AddLiquidityRequest",
    "CreatePoolRequest",
    "QuoteRequest",
    "RemoveLiquidityRequest",
    "SwapRequest",
    # Responses
    "AddLiquidityResponse",
    "ErrorResponse",
    "PoolResponse",
    "QuoteResponse",
    "RemoveLiquidityResponse",
    "SwapResponse",
]
