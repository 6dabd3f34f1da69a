"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded

from phantom_relay.api.limiter import limiter
from phantom_relay.config import settings
from phantom_relay.errors import NO_FABRICATION_NOTE, RelayError
from phantom_relay.tools.phantombuster import close_client

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = settings.cors_origins.split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Refuse to start without PhantomBuster credentials; close the client on shutdown."""
    missing = settings.missing_credentials()
    if missing:
        raise RuntimeError(f"Missing PhantomBuster credentials: {', '.join(missing)}")
    yield
    await close_client()


app = FastAPI(
    title="PhantomBuster LinkedIn Search Relay",
    description="Launches PhantomBuster LinkedIn people searches and merges their results",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "note": NO_FABRICATION_NOTE},
    )


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    """Render relay errors with their status code and the no-fabrication note."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors like any other validation failure."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', []))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return _error_response(400, f"Invalid request: {details}")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a clear message when rate limit is exceeded."""
    return _error_response(429, f"Rate limit exceeded: {exc.detail}")


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


# Import and include routers
from phantom_relay.api.routes import search  # noqa: E402

app.include_router(search.router, tags=["Search"])


@app.get("/", response_class=PlainTextResponse)
def root():
    """Liveness check."""
    return "PhantomBuster LinkedIn search service is running."


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
