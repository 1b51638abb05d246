"""API endpoints for pool operations.

Handlers are plain functions so FastAPI runs them in its threadpool; the
engine blocks on per-pool locks.
"""

import threading

import structlog
from fastapi import APIRouter, Depends

from stableswap.engine import StableSwapEngine
from stableswap.ledger import InMemoryLedger
from stableswap.models.requests import (
    AddLiquidityRequest,
    CreatePoolRequest,
    QuoteRequest,
    RemoveLiquidityRequest,
    SwapRequest,
)
from stableswap.models.responses import (
    AddLiquidityResponse,
    PoolResponse,
    QuoteResponse,
    RemoveLiquidityResponse,
    SwapResponse,
)
from stableswap.state import SwapDirection

logger = structlog.get_logger()

router = APIRouter(prefix="/pools")

_default_engine: StableSwapEngine | None = None
_default_engine_lock = threading.Lock()


def get_default_engine() -> StableSwapEngine:
    """Process-wide engine backed by an in-memory ledger, created on first use."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = StableSwapEngine(InMemoryLedger())
        return _default_engine


def get_engine() -> StableSwapEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject a pre-seeded engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


@router.post("", status_code=201)
def create_pool(
    request: CreatePoolRequest,
    engine: StableSwapEngine = Depends(get_engine),
) -> PoolResponse:
    """Create a pool and initialize its vaults under `authority`."""
    pool_id = engine.create_pool(
        request.authority, request.asset_a, request.asset_b, request.amplification
    )
    engine.init_vaults(pool_id, request.authority)
    return PoolResponse.from_pool(engine.get_pool(pool_id), engine.now())


@router.get("/{pool_id}")
def get_pool(pool_id: int, engine: StableSwapEngine = Depends(get_engine)) -> PoolResponse:
    return PoolResponse.from_pool(engine.get_pool(pool_id), engine.now())


@router.post("/{pool_id}/quote", response_model_exclude_none=True)
def quote(
    pool_id: int,
    request: QuoteRequest,
    engine: StableSwapEngine = Depends(get_engine),
) -> QuoteResponse:
    """Price a swap or migration without executing it."""
    if request.kind == "migration":
        result = engine.quote_migration(pool_id, request.amount_in)
        return QuoteResponse.from_migration(result, request.direction)
    return QuoteResponse.from_swap(engine.quote_swap(pool_id, request.amount_in, request.direction))


@router.post("/{pool_id}/swap")
def swap(
    pool_id: int,
    request: SwapRequest,
    engine: StableSwapEngine = Depends(get_engine),
) -> SwapResponse:
    """Execute a swap or a migration.

    Error Handling:
        - Invalid request schema: 422 (pydantic)
        - Engine rejection: 400 with the error name and code
        - Unknown pool: 404
    """
    logger.info(
        "received_swap",
        pool_id=pool_id,
        kind=request.kind,
        direction=request.direction.value,
        amount_in=request.amount_in,
    )
    if request.kind == "migration":
        execute = (
            engine.migrate_a_to_b if request.direction is SwapDirection.A_TO_B else engine.migrate_b_to_a
        )
    else:
        execute = engine.swap_a_to_b if request.direction is SwapDirection.A_TO_B else engine.swap_b_to_a

    amount_out = execute(
        pool_id, request.caller, request.amount_in, request.min_amount_out, request.deadline
    )
    return SwapResponse(amount_out=amount_out)


@router.post("/{pool_id}/liquidity/add")
def add_liquidity(
    pool_id: int,
    request: AddLiquidityRequest,
    engine: StableSwapEngine = Depends(get_engine),
) -> AddLiquidityResponse:
    lp_minted = engine.add_liquidity(
        pool_id, request.caller, request.amount_a, request.amount_b, request.min_lp
    )
    return AddLiquidityResponse(lp_minted=lp_minted)


@router.post("/{pool_id}/liquidity/remove")
def remove_liquidity(
    pool_id: int,
    request: RemoveLiquidityRequest,
    engine: StableSwapEngine = Depends(get_engine),
) -> RemoveLiquidityResponse:
    amount_a, amount_b = engine.remove_liquidity(
        pool_id, request.caller, request.lp_amount, request.min_a, request.min_b
    )
    return RemoveLiquidityResponse(amount_a=amount_a, amount_b=amount_b)
