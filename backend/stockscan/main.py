"""FastAPI application entry point."""

import logging
import sys
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from stockscan import __version__
from stockscan.api.routes import api_router
from stockscan.core.config import settings
from stockscan.core.errors import StockLookupError
from stockscan.core.rate_limit import limiter

# Configure logging - use JSON format in production, human-readable in dev
root_logger = logging.getLogger()
root_logger.setLevel(getattr(logging, settings.log_level))
root_logger.handlers.clear()

if settings.debug:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
else:
    import json as _json

    class JSONFormatter(logging.Formatter):
        def format(self, record):
            return _json.dumps({
                "ts": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                "module": record.module,
                "line": record.lineno,
            })

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

root_logger.addHandler(handler)
logger = logging.getLogger(__name__)
request_logger = logging.getLogger("requests")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in ["/health", "/", "/docs", "/openapi.json"]:
            return await call_next(request)

        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        request_logger.info(
            f"Request: {request.method} {request.url.path} - Client: {client_ip}"
        )

        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
            request_logger.log(
                log_level,
                f"Response: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - Time: {process_time:.3f}s - Client: {client_ip}"
            )
            return response
        except Exception as e:
            process_time = time.time() - start_time
            request_logger.error(
                f"Error: {request.method} {request.url.path} - "
                f"Exception: {str(e)} - Time: {process_time:.3f}s - Client: {client_ip}"
            )
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler. Owns the outbound SAP client."""
    logger.info("Starting warehouse stock scanner API")
    if not settings.sap_configured:
        logger.warning("SAP_BASE_API_URL is not set; stock lookups will fail with 500")

    app.state.sap_client = httpx.AsyncClient(timeout=settings.sap_request_timeout)
    try:
        yield
    finally:
        await app.state.sap_client.aclose()
        logger.info("Shutting down warehouse stock scanner API")


async def stock_lookup_error_handler(request: Request, exc: StockLookupError):
    """Render a lookup failure as the structured error body the scanner reads."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers={"Cache-Control": "no-store"},
    )


app = FastAPI(
    title="Warehouse Stock Scanner",
    description="Barcode to SAP warehouse stock lookup",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Rate limiting setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(StockLookupError, stock_lookup_error_handler)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware - added last so it runs first (Starlette LIFO order)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=600,
)

app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
def health_check():
    """Basic liveness check endpoint."""
    return {"status": "healthy", "version": __version__, "sap_configured": settings.sap_configured}


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Warehouse Stock Scanner API",
        "docs": "/docs",
        "health": "/health",
    }
