"""FastAPI application for the pool engine.

Engine errors are translated to JSON responses of the form
{"error": <error class>, "detail": <message>}.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pairswap import __version__
from pairswap.api.endpoints import router
from pairswap.errors import (
    DuplicatePair,
    InvariantViolation,
    PairNotFound,
    PoolError,
    ReentrantCall,
    SlippageExceeded,
    StateError,
    TransferError,
    Unauthorized,
    ValidationError,
)
from pairswap.log_config import configure_logging
from pairswap.safe_int import SafeIntError, Uint256Overflow

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("PAIRSWAP_HOST", "0.0.0.0")
PORT = int(os.environ.get("PAIRSWAP_PORT", "8000"))
DEBUG = os.environ.get("PAIRSWAP_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("PAIRSWAP_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
LOG_JSON = os.environ.get("PAIRSWAP_LOG_JSON", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="pairswap",
    description="Two-asset constant product liquidity pools",
    version=__version__,
)

app.include_router(router)


def status_for(exc: PoolError) -> int:
    """HTTP status code for an engine error."""
    if isinstance(exc, PairNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, DuplicatePair):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, StateError | SlippageExceeded | ReentrantCall):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, TransferError):
        return status.HTTP_402_PAYMENT_REQUIRED
    if isinstance(exc, Unauthorized):
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, InvariantViolation):
        logger.error("invariant_violation_response", path=request.url.path, detail=str(exc))
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
        )
    return _error_response(status_code, exc)


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    if isinstance(exc, Uint256Overflow):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)
    logger.error("arithmetic_error", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - PAIRSWAP_HOST: Host to bind to (default: 0.0.0.0)
    - PAIRSWAP_PORT: Port to bind to (default: 8000)
    - PAIRSWAP_DEBUG: Enable debug/reload mode (default: false)
    - PAIRSWAP_LOG_LEVEL: Minimum log level (default: INFO, DEBUG in debug mode)
    - PAIRSWAP_LOG_JSON: Emit JSON log lines (default: false)
    - PAIRSWAP_ENABLE_FAUCET: Allow POST /accounts/{holder}/credit (default: false)
    """
    configure_logging(LOG_LEVEL, json=LOG_JSON)
    uvicorn.run(
        "pairswap.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
