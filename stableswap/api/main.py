"""FastAPI application for the StableSwap engine."""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stableswap import __version__
from stableswap.api.endpoints import router
from stableswap.errors import NotFoundError, StableSwapError
from stableswap.models.responses import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("STABLESWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("STABLESWAP_PORT", "8000"))
DEBUG = os.environ.get("STABLESWAP_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="StableSwap Pool Engine",
    description="Two-asset StableSwap pools with amplification ramping and LP farming",
    version=__version__,
)


@app.exception_handler(StableSwapError)
async def stableswap_error_handler(request: Request, exc: StableSwapError) -> JSONResponse:
    """Map engine errors to 400, or 404 for unknown pools and farms."""
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        code=exc.code,
        detail=str(exc),
    )
    body = ErrorResponse(error=type(exc).__name__, code=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - STABLESWAP_HOST: Host to bind to (default: 0.0.0.0)
    - STABLESWAP_PORT: Port to bind to (default: 8000)
    - STABLESWAP_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "stableswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
