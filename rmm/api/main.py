"""FastAPI application for the pool quote service.

Note: Rate limiting is intentionally not implemented at the application level.
It should be handled at the infrastructure layer (reverse proxy / load balancer).
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rmm import __version__
from rmm.api.endpoints import router
from rmm.curve.errors import CurveError
from rmm.math.fixed_point import DomainError
from rmm.pool.errors import NotInitialized, PoolError
from rmm.safe_int import SafeIntError

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("RMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("RMM_PORT", "8000"))
DEBUG = os.environ.get("RMM_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

logger = structlog.get_logger()

app = FastAPI(
    title="RMM Curve Engine",
    description="Quotes against a covered-call pool of a yield-bearing asset and its principal",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


def _error_response(status_code: int, err: Exception) -> JSONResponse:
    logger.warning("request_rejected", error=type(err).__name__, detail=str(err))
    return JSONResponse(
        status_code=status_code,
        content={"error": type(err).__name__, "detail": str(err)},
    )


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, err: PoolError) -> JSONResponse:
    """Pool preconditions: 409 before initialization, 400 otherwise."""
    return _error_response(409 if isinstance(err, NotInitialized) else 400, err)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, err: DomainError) -> JSONResponse:
    """Amounts the curve cannot price."""
    return _error_response(400, err)


@app.exception_handler(CurveError)
async def curve_error_handler(request: Request, err: CurveError) -> JSONResponse:
    return _error_response(400, err)


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, err: SafeIntError) -> JSONResponse:
    """Amounts exceeding a reserve or the 256-bit range."""
    return _error_response(400, err)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(debug: bool = DEBUG) -> None:
    """Console structlog output, DEBUG level when debug is set."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
    )


def run() -> None:
    """Run the quote API server.

    Configuration via environment variables:
    - RMM_HOST: Host to bind to (default: 0.0.0.0)
    - RMM_PORT: Port to bind to (default: 8000)
    - RMM_DEBUG: Enable debug/reload mode (default: false)
    - RMM_* pool parameters, see PoolConfig.from_env
    """
    configure_logging()
    uvicorn.run(
        "rmm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
